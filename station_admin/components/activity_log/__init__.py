"""
Activity Log Component
"""
from .routes import activity_log_bp
from .service import ActivityLogService


def init_activity_log(app):
    """Initialize Activity Log component with Flask app"""
    app.register_blueprint(activity_log_bp)
    return ActivityLogService()


__all__ = ['activity_log_bp', 'ActivityLogService', 'init_activity_log']
