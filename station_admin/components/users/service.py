"""
Users Service
User accounts, roles and permission assignment against the backend
"""
from typing import Any, Dict, Iterable, List, Optional

from station_admin.core.api_client import get_backend_client
from station_admin.core.listing import filter_records, same_id
from station_admin.core.permissions import role_name

USER_SEARCH_FIELDS = ('username', 'email')
PERMISSION_SEARCH_FIELDS = ('name', 'description', 'resource')
USER_FIELDS = ('username', 'email', 'password', 'phoneNumber', 'roleId')


class UsersService:
    """Service for the Users component"""

    def __init__(self, client=None):
        self.client = client

    def _client(self):
        return self.client or get_backend_client()

    # Users

    def list_users(self) -> List[Dict[str, Any]]:
        return self._client().get('/users', 'Failed to fetch users') or []

    def get_user(self, user_id) -> Dict[str, Any]:
        return self._client().get(f'/users/{user_id}', 'Failed to fetch user')

    def create_user(self, form: Dict[str, Any]) -> Dict[str, Any]:
        payload = build_user_payload(form, require_password=True)
        return self._client().post('/users', 'Failed to create user', json=payload)

    def update_user(self, user_id, form: Dict[str, Any]) -> Dict[str, Any]:
        payload = build_user_payload(form, require_password=False)
        return self._client().put(f'/users/{user_id}', 'Failed to update user', json=payload)

    def delete_user(self, user_id) -> None:
        self._client().delete(f'/users/{user_id}', 'Failed to delete user')

    def list_directors(self) -> List[Dict[str, Any]]:
        """Users holding the director role, with the companies they direct"""
        users = self._client().get('/users', 'Failed to fetch directors') or []
        return [
            dict(user, directedCompanies=user.get('companies') or [])
            for user in users_with_role(users, 'director')
        ]

    def list_managers(self) -> List[Dict[str, Any]]:
        users = self._client().get('/users', 'Failed to fetch managers') or []
        return users_with_role(users, 'manager')

    def get_logged_in_director(self) -> Optional[Dict[str, Any]]:
        """The current user when they are a director, otherwise None"""
        user = self._client().get('/users/me', 'Failed to fetch director details')
        if role_name(user) != 'director':
            return None
        return dict(user, directedCompanies=user.get('companies') or [])

    # Roles and permissions

    def list_roles(self) -> List[Dict[str, Any]]:
        return self._client().get('/roles', 'Failed to fetch roles') or []

    def list_permissions(self) -> List[Dict[str, Any]]:
        return self._client().get('/permissions', 'Failed to fetch permissions') or []

    def get_user_permissions(self, user_id) -> List[Dict[str, Any]]:
        return self._client().get(f'/users/{user_id}/permissions', 'Failed to fetch user permissions') or []

    def update_user_permissions(self, user_id, permission_ids: Iterable[int]):
        return self._client().put(
            f'/users/{user_id}/permissions',
            'Failed to update user permissions',
            json={'permissions': list(permission_ids)}
        )

    def update_role_permissions(self, role_id, permission_ids: Iterable[int]):
        return self._client().put(
            f'/roles/{role_id}/permissions',
            'Failed to update role permissions',
            json={'permissions': list(permission_ids)}
        )


def users_with_role(users: Iterable[Dict[str, Any]], role: str) -> List[Dict[str, Any]]:
    return [user for user in users if role_name(user) == role]


def build_user_payload(form: Dict[str, Any], require_password: bool) -> Dict[str, Any]:
    """Collect user fields from a submitted form

    An empty password on update means "keep the current password".
    """
    payload = {}
    for name in USER_FIELDS:
        value = form.get(name)
        if isinstance(value, str):
            value = value.strip() if name != 'password' else value
        if value in (None, ''):
            continue
        payload[name] = value

    if 'roleId' in payload:
        try:
            payload['roleId'] = int(payload['roleId'])
        except (TypeError, ValueError):
            raise ValueError('Please select a valid role')

    missing = [name for name in ('username', 'email') if name not in payload]
    if require_password and 'password' not in payload:
        missing.append('password')
    if missing:
        raise ValueError(f'Missing required fields: {", ".join(missing)}')
    return payload


def role_label(user: Dict[str, Any], roles: Iterable[Dict[str, Any]]) -> str:
    """Display name of a user's role"""
    role = user.get('Role') or user.get('role')
    if isinstance(role, dict) and role.get('name'):
        return role['name']
    if isinstance(role, str) and role:
        return role
    if user.get('roleId'):
        for candidate in roles:
            if same_id(candidate.get('id'), user['roleId']):
                return candidate.get('name') or 'Unknown Role'
        return 'Unknown Role'
    return 'No Role'


def role_id_of(user: Dict[str, Any]) -> Optional[int]:
    role = user.get('Role') or user.get('role')
    if isinstance(role, dict) and role.get('id'):
        return role['id']
    return user.get('roleId')


def search_users(users, term):
    return filter_records(users, term, USER_SEARCH_FIELDS)


def search_permissions(permissions, term):
    return filter_records(permissions, term, PERMISSION_SEARCH_FIELDS)


def group_by_resource(permissions: Iterable[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    """Group permissions by resource, keeping first-seen resource order"""
    grouped: Dict[str, List[Dict[str, Any]]] = {}
    for permission in permissions:
        grouped.setdefault(permission.get('resource'), []).append(permission)
    return grouped


def role_permission_ids(role: Dict[str, Any]) -> List[int]:
    return [p['id'] for p in role.get('Permissions') or role.get('permissions') or []]


def override_permission_ids(user: Dict[str, Any]) -> List[int]:
    """Permissions granted to the user directly rather than through the role"""
    return [
        p['id'] for p in user.get('permissions') or []
        if (p.get('UserPermission') or {}).get('override')
    ]


def toggle_permission(selected: List[int], permission_id: int) -> List[int]:
    if permission_id in selected:
        return [pid for pid in selected if pid != permission_id]
    return selected + [permission_id]


def add_all_filtered(selected: List[int], filtered: Iterable[Dict[str, Any]]) -> List[int]:
    """Union of the selection and every permission currently shown"""
    result = list(selected)
    for permission in filtered:
        if permission['id'] not in result:
            result.append(permission['id'])
    return result


def remove_all_filtered(selected: List[int], filtered: Iterable[Dict[str, Any]]) -> List[int]:
    filtered_ids = {permission['id'] for permission in filtered}
    return [pid for pid in selected if pid not in filtered_ids]
