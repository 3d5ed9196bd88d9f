"""
Activity Log Routes
"""
from flask import Blueprint, jsonify, request

from station_admin.core.listing import to_int
from station_admin.core.permissions import permission_required
from .service import ActivityLogService

# Create blueprint for activity log routes
activity_log_bp = Blueprint('activity_log', __name__)

# Initialize service
service = ActivityLogService()


@activity_log_bp.route('/api/logs')
@permission_required('logs:view')
def api_logs():
    """Get activity logs, ``?level=ERROR&limit=20``"""
    level_filter = request.args.get('level', 'ALL').upper()
    limit = to_int(request.args.get('limit'), 50)

    logs = service.get_logs(level_filter=level_filter, limit=limit)

    return jsonify(logs)
