"""
Activity Log Service
"""
from station_admin.core.monitoring import LOG_LEVELS, get_logs


class ActivityLogService:
    """Service for Activity Log component"""

    def get_logs(self, level_filter='ALL', limit=50):
        """Get activity logs with filtering

        Unknown levels fall back to 'ALL'; a limit of 0 returns everything.
        """
        if level_filter not in LOG_LEVELS:
            level_filter = 'ALL'
        return get_logs(level_filter=level_filter, limit=max(limit, 0))
