"""
Dashboard Overview Routes
"""
from flask import Blueprint, jsonify, render_template

from station_admin.core.permissions import current_user, login_required, permission_required
from .service import DashboardOverviewService

dashboard_overview_bp = Blueprint('dashboard_overview', __name__)

# Initialize service
service = DashboardOverviewService()


@dashboard_overview_bp.route('/dashboard')
@permission_required('dashboard:view')
def dashboard():
    """Welcome page with record counts"""
    return render_template('dashboard.html', user=current_user(), stats=service.get_stats())


@dashboard_overview_bp.route('/api/dashboard/stats')
@login_required
def api_dashboard_stats():
    return jsonify(service.get_stats())


@dashboard_overview_bp.route('/api/backend/health')
@login_required
def api_backend_health():
    """Backend reachability for the header status indicator"""
    health = service.get_backend_health()
    return jsonify(health), 200 if health['healthy'] else 503


def init_dashboard_overview(app):
    """Initialize dashboard overview component with Flask app"""
    app.register_blueprint(dashboard_overview_bp, url_prefix='')
    return dashboard_overview_bp
