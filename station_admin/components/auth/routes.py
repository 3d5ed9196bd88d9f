"""
Authentication Routes
Login screen, logout and session user refresh
"""
from flask import Blueprint, flash, jsonify, redirect, render_template, request, session, url_for

from station_admin.core.api_client import BackendError, get_backend_client
from station_admin.core.monitoring import add_log
from station_admin.core.navigation import landing_endpoint
from station_admin.core.permissions import current_user, login_required
from .service import AuthService

auth_bp = Blueprint('auth', __name__)

# Service instance
service = AuthService()


def _safe_next(target, user):
    """Only follow local redirect targets, otherwise the user's landing page"""
    if target and target.startswith('/') and not target.startswith('//'):
        return target
    return url_for(landing_endpoint(user))


@auth_bp.route('/login', methods=['GET', 'POST'])
def login():
    """Login page"""
    if session.get('token') and current_user():
        return redirect(url_for(landing_endpoint(current_user())))

    if request.method == 'GET':
        return render_template('login.html', error=None, username='')

    username = request.form.get('username', '').strip()
    password = request.form.get('password', '')

    try:
        result = service.login(username, password)
        user = result['user']
        if not user:
            user = AuthService(client=get_backend_client(token=result['token'])).refresh_user()
    except BackendError as e:
        add_log('WARNING', f'Login failed for {username or "<empty>"}: {e.message}')
        return render_template('login.html', error=e.message, username=username), 401

    session.clear()
    session.permanent = True
    session['token'] = result['token']
    session['user'] = user
    add_log('INFO', f'User {user.get("username", username)} logged in')

    return redirect(_safe_next(request.args.get('next'), user))


@auth_bp.route('/logout', methods=['POST'])
def logout():
    """Clear the session and return to the login page"""
    user = current_user()
    session.clear()
    if user:
        add_log('INFO', f'User {user.get("username")} logged out')
    flash('You have been logged out', 'success')
    return redirect(url_for('auth.login'))


@auth_bp.route('/api/auth/me')
@login_required
def api_refresh_user():
    """Reload the session user from the backend"""
    try:
        user = service.refresh_user()
    except BackendError as e:
        if e.status_code == 401:
            session.clear()
        return jsonify({'error': e.message}), e.status_code or 502

    session['user'] = user
    return jsonify(user)


def init_auth(app, limiter=None):
    """Initialize auth component with Flask app"""
    if limiter is not None:
        limiter.limit(app.config['LOGIN_RATE_LIMIT'], methods=['POST'])(login)
    app.register_blueprint(auth_bp)
    return auth_bp
