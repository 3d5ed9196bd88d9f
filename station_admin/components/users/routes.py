"""
Users Routes
User accounts, role permissions and per-user permission overrides
"""
from flask import Blueprint, current_app, flash, jsonify, redirect, render_template, request, session, url_for

from station_admin.core.api_client import BackendError
from station_admin.core.listing import paginate, same_id, to_int
from station_admin.core.monitoring import add_log
from station_admin.core.permissions import current_user, has_permission, permission_required
from .service import (
    UsersService,
    add_all_filtered,
    group_by_resource,
    override_permission_ids,
    remove_all_filtered,
    role_id_of,
    role_label,
    role_permission_ids,
    search_permissions,
    search_users,
    toggle_permission,
)

users_bp = Blueprint('users', __name__)

# Service instance
service = UsersService()

TABS = ('users', 'roles', 'overrides')


def _find(records, record_id):
    return next((r for r in records if same_id(r.get('id'), record_id)), None)


def _role_selection(role):
    """Working permission selection for a role, kept in the session until saved"""
    selections = session.get('role_selection', {})
    key = str(role['id'])
    if key not in selections:
        return role_permission_ids(role)
    return list(selections[key])


def _store_role_selection(role_id, selected):
    selections = dict(session.get('role_selection', {}))
    selections[str(role_id)] = selected
    session['role_selection'] = selections


def _clear_role_selection(role_id):
    selections = dict(session.get('role_selection', {}))
    selections.pop(str(role_id), None)
    session['role_selection'] = selections


@users_bp.route('/users')
@permission_required('users:manage')
def users_page():
    """Users page with its three tabs"""
    tab = request.args.get('tab', 'users')
    if tab not in TABS:
        tab = 'users'
    user = current_user()
    context = {
        'tab': tab,
        'can_create': has_permission('users:create', user),
        'can_update': has_permission('users:update', user),
        'can_delete': has_permission('users:delete', user),
    }

    try:
        roles = service.list_roles()
        users = service.list_users()
        permissions = service.list_permissions() if tab != 'users' else []
    except BackendError as e:
        add_log('ERROR', f'Failed to load users page: {e.message}')
        flash('Failed to load data', 'error')
        roles, users, permissions = [], [], []

    context['roles'] = roles

    if tab == 'users':
        context.update(_users_tab(users, roles))
    elif tab == 'roles':
        context.update(_roles_tab(roles, permissions))
    else:
        context.update(_overrides_tab(users, permissions))

    return render_template('users.html', **context)


def _users_tab(users, roles):
    term = request.args.get('q', '')
    sizes, default_size = current_app.config['USER_PAGE_SIZES'], current_app.config['USER_DEFAULT_PAGE_SIZE']
    page = paginate(
        search_users(users, term),
        to_int(request.args.get('page'), 1),
        to_int(request.args.get('per_page'), default_size),
        allowed_sizes=sizes,
        default_size=default_size,
        max_visible=current_app.config['MAX_VISIBLE_PAGES']
    )
    editing = _find(users, to_int(request.args.get('edit')))
    return {
        'search_term': term,
        'page': page,
        'page_sizes': sizes,
        'editing': editing,
        'editing_role_id': role_id_of(editing) if editing else None,
        'role_label': lambda u: role_label(u, roles),
    }


def _roles_tab(roles, permissions):
    term = request.args.get('q', '')
    selected_role = _find(roles, to_int(request.args.get('role')))
    filtered = search_permissions(permissions, term)
    page_size = current_app.config['PERMISSIONS_PAGE_SIZE']
    page = paginate(filtered, to_int(request.args.get('page'), 1), page_size, default_size=page_size)
    return {
        'search_term': term,
        'selected_role': selected_role,
        'selected_ids': _role_selection(selected_role) if selected_role else [],
        'permissions': permissions,
        'filtered_count': len(filtered),
        'page': page,
    }


def _overrides_tab(users, permissions):
    term = request.args.get('q', '')
    selected_user = _find(users, to_int(request.args.get('user')))
    return {
        'search_term': term,
        'users': search_users(users, term),
        'selected_user': selected_user,
        'selected_ids': override_permission_ids(selected_user) if selected_user else [],
        'grouped_permissions': group_by_resource(permissions),
    }


@users_bp.route('/users', methods=['POST'])
@permission_required('users:manage')
def create_user():
    if not has_permission('users:create', current_user()):
        flash('You do not have permission to create users', 'error')
        return redirect(url_for('users.users_page'))

    try:
        service.create_user(request.form)
        add_log('INFO', f'User {request.form.get("username")} created')
        flash('User created successfully', 'success')
    except ValueError as e:
        flash(str(e), 'error')
    except BackendError as e:
        add_log('ERROR', f'Failed to create user: {e.message}')
        flash(e.message or 'Operation failed', 'error')
    return redirect(url_for('users.users_page'))


@users_bp.route('/users/<int:user_id>/edit', methods=['POST'])
@permission_required('users:manage')
def update_user(user_id):
    if not has_permission('users:update', current_user()):
        flash('You do not have permission to update users', 'error')
        return redirect(url_for('users.users_page'))

    try:
        service.update_user(user_id, request.form)
        add_log('INFO', f'User {user_id} updated')
        flash('User updated successfully', 'success')
    except ValueError as e:
        flash(str(e), 'error')
        return redirect(url_for('users.users_page', edit=user_id))
    except BackendError as e:
        add_log('ERROR', f'Failed to update user {user_id}: {e.message}')
        flash(e.message or 'Operation failed', 'error')
    return redirect(url_for('users.users_page'))


@users_bp.route('/users/<int:user_id>/delete', methods=['POST'])
@permission_required('users:manage')
def delete_user(user_id):
    if not has_permission('users:delete', current_user()):
        flash('You do not have permission to delete users', 'error')
        return redirect(url_for('users.users_page'))

    try:
        service.delete_user(user_id)
        add_log('INFO', f'User {user_id} deleted')
        flash('User deleted successfully', 'success')
    except BackendError as e:
        add_log('ERROR', f'Failed to delete user {user_id}: {e.message}')
        flash(e.message or 'Failed to delete user', 'error')
    return redirect(url_for('users.users_page'))


@users_bp.route('/users/roles/<int:role_id>/selection', methods=['POST'])
@permission_required('users:manage')
def update_role_selection(role_id):
    """Change the working permission selection of a role"""
    term = request.form.get('q', '')
    page = to_int(request.form.get('page'), 1)
    try:
        role = _find(service.list_roles(), role_id)
        permissions = service.list_permissions()
    except BackendError as e:
        flash(e.message, 'error')
        return redirect(url_for('users.users_page', tab='roles'))
    if role is None:
        flash('Role not found', 'error')
        return redirect(url_for('users.users_page', tab='roles'))

    selected = _role_selection(role)
    operation = request.form.get('op')
    filtered = search_permissions(permissions, term)

    if operation == 'toggle':
        permission_id = to_int(request.form.get('permission_id'))
        if permission_id is not None:
            selected = toggle_permission(selected, permission_id)
    elif operation == 'add_filtered':
        selected = add_all_filtered(selected, filtered)
        flash('Added all filtered permissions', 'success')
    elif operation == 'remove_filtered':
        selected = remove_all_filtered(selected, filtered)
        flash('Removed all filtered permissions', 'success')
    elif operation == 'reset':
        _clear_role_selection(role_id)
        return redirect(url_for('users.users_page', tab='roles', role=role_id, q=term, page=page))

    _store_role_selection(role_id, selected)
    return redirect(url_for('users.users_page', tab='roles', role=role_id, q=term, page=page))


@users_bp.route('/users/roles/<int:role_id>/permissions', methods=['POST'])
@permission_required('users:manage')
def save_role_permissions(role_id):
    try:
        role = _find(service.list_roles(), role_id)
        if role is None:
            flash('Role not found', 'error')
            return redirect(url_for('users.users_page', tab='roles'))
        service.update_role_permissions(role_id, _role_selection(role))
        _clear_role_selection(role_id)
        add_log('INFO', f'Permissions updated for {role.get("name")} role')
        flash(f'Permissions updated for {role.get("name")} role', 'success')
    except BackendError as e:
        add_log('ERROR', f'Failed to update permissions of role {role_id}: {e.message}')
        flash('Failed to update permissions', 'error')
    return redirect(url_for('users.users_page', tab='roles', role=role_id))


@users_bp.route('/users/<int:user_id>/permissions', methods=['POST'])
@permission_required('users:manage')
def save_user_permissions(user_id):
    permission_ids = [pid for pid in (to_int(v) for v in request.form.getlist('permissions')) if pid is not None]
    username = request.form.get('username') or str(user_id)
    try:
        service.update_user_permissions(user_id, permission_ids)
        add_log('INFO', f'Permissions updated for {username}')
        flash(f'Permissions updated for {username}', 'success')
    except BackendError as e:
        add_log('ERROR', f'Failed to update permissions of user {user_id}: {e.message}')
        flash('Failed to update permissions', 'error')
    return redirect(url_for('users.users_page', tab='overrides', user=user_id))


@users_bp.route('/api/users/<int:user_id>/permissions')
@permission_required('users:manage')
def api_user_permissions(user_id):
    try:
        return jsonify(service.get_user_permissions(user_id))
    except BackendError as e:
        return jsonify({'error': e.message}), e.status_code or 502


def init_users(app):
    """Initialize users component with Flask app"""
    app.register_blueprint(users_bp)
    return users_bp
