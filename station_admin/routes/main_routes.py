"""
Main page routes for dashboard
"""
from datetime import datetime

from flask import Blueprint, redirect, url_for

from station_admin.core.navigation import landing_endpoint, visible_menu
from station_admin.core.permissions import current_user, has_permission, role_name

# Create main blueprint
main_bp = Blueprint('main', __name__)


@main_bp.route('/')
def index():
    """Send users to their landing page, or to the login page when signed out"""
    if current_user():
        return redirect(url_for(landing_endpoint(current_user())))
    return redirect(url_for('auth.login'))


@main_bp.app_context_processor
def inject_shell():
    """Values the sidebar/header shell needs on every page"""
    user = current_user()
    return {
        'current_user': user,
        'current_role': role_name(user),
        'menu_items': visible_menu(user) if user else [],
        'can': lambda permission: has_permission(permission, user),
        'current_time': datetime.now(),
    }
