"""
Permission checks and route guards

Permissions are ``resource:action`` strings. A user holds a permission when
their server-supplied permission list contains the same resource with the
same action or the ``manage`` action, or contains ``admin:manage``.
"""
from functools import wraps

from flask import abort, jsonify, redirect, request, session, url_for

MANAGE_ACTION = 'manage'
SUPERUSER_RESOURCE = 'admin'


def current_user():
    """Get the logged-in user stored in the session"""
    return session.get('user')


def has_permission(permission, user):
    """Check a single ``resource:action`` permission against a user"""
    if not user or not user.get('permissions'):
        return False

    resource, _, action = permission.partition(':')

    for granted in user['permissions']:
        granted_resource = granted.get('resource')
        granted_action = granted.get('action')
        if granted_resource == resource and granted_action in (action, MANAGE_ACTION):
            return True
        if granted_resource == SUPERUSER_RESOURCE and granted_action == MANAGE_ACTION:
            return True
    return False


def has_any_permission(permissions, user):
    return any(has_permission(permission, user) for permission in permissions)


def role_name(user):
    """Lower-cased role name; the backend sends either ``role`` or ``Role``"""
    if not user:
        return None
    role = user.get('role') or user.get('Role')
    if isinstance(role, dict):
        role = role.get('name')
    return role.lower() if role else None


def is_admin(user):
    return role_name(user) == 'admin'


def is_director(user):
    return role_name(user) == 'director'


def is_manager(user):
    return role_name(user) == 'manager'


def _wants_json():
    return request.path.startswith('/api/')


def login_required(view):
    """Redirect anonymous users to the login page"""
    @wraps(view)
    def wrapped(*args, **kwargs):
        if not current_user():
            if _wants_json():
                return jsonify({'error': 'Authentication required'}), 401
            return redirect(url_for('auth.login', next=request.path))
        return view(*args, **kwargs)
    return wrapped


def permission_required(*permissions):
    """Allow the view when the user holds any of the given permissions"""
    def decorator(view):
        @wraps(view)
        @login_required
        def wrapped(*args, **kwargs):
            if not has_any_permission(permissions, current_user()):
                if _wants_json():
                    return jsonify({'error': 'Permission denied'}), 403
                abort(403)
            return view(*args, **kwargs)
        return wrapped
    return decorator
