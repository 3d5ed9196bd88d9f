"""
Dashboard Overview Service
"""
import logging

from flask import current_app

from station_admin.core.api_client import BackendError, get_backend_client
from station_admin.core.monitoring import check_backend_health

logger = logging.getLogger(__name__)

# card key -> (endpoint, error message)
STAT_SOURCES = {
    'companies': ('/companies', 'Failed to fetch companies'),
    'stations': ('/stations', 'Failed to fetch stations'),
    'users': ('/users', 'Failed to fetch users'),
}


class DashboardOverviewService:
    """Service for the Dashboard Overview component"""

    def __init__(self, client=None):
        self.client = client

    def _client(self):
        return self.client or get_backend_client()

    def get_stats(self):
        """Record counts per card; None when a count cannot be fetched

        Users without access to one of the lists still get the other cards.
        """
        client = self._client()
        stats = {}
        for key, (path, error) in STAT_SOURCES.items():
            try:
                records = client.get(path, error) or []
                stats[key] = len(records)
            except BackendError as e:
                logger.warning(f'Dashboard stat {key} unavailable: {e.message}')
                stats[key] = None
        return stats

    def get_backend_health(self):
        config = current_app.config
        return check_backend_health(
            config['API_BASE_URL'],
            timeout=config['HEALTH_CHECK_TIMEOUT'],
            session=current_app.extensions.get('backend_session')
        )
