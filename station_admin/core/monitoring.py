"""
Activity log and backend health monitoring
"""
import logging
from collections import deque
from datetime import datetime

import requests

from station_admin.config.settings import DashboardConfig

logger = logging.getLogger(__name__)

# Global state - shared across all components
system_logs = deque(maxlen=DashboardConfig.MAX_LOG_ENTRIES)

LOG_LEVELS = ('INFO', 'WARNING', 'ERROR')


def add_log(level, message):
    """Add activity log entry and mirror it to the module logger"""
    log_entry = {
        'timestamp': datetime.now().isoformat(),
        'level': level,
        'message': message
    }
    system_logs.append(log_entry)
    logger.log(getattr(logging, level, logging.INFO), message)
    return log_entry


def get_logs(level_filter='ALL', limit=50):
    """Get filtered logs, most recent last"""
    logs = list(system_logs)

    if level_filter != 'ALL':
        logs = [log for log in logs if log['level'] == level_filter]

    if limit and len(logs) > limit:
        logs = logs[-limit:]

    return logs


def check_backend_health(base_url, timeout=3, session=None):
    """Check whether the backend answers HTTP at all

    Any HTTP response below 500 counts as reachable: the API root may well
    answer 401/404 without a token.
    """
    http = session or requests
    started = datetime.now()
    try:
        response = http.get(base_url, timeout=timeout)
        healthy = response.status_code < 500
        return {
            'healthy': healthy,
            'status': 'healthy' if healthy else 'unhealthy',
            'status_code': response.status_code,
            'url': base_url,
            'response_ms': int((datetime.now() - started).total_seconds() * 1000),
            'last_check': datetime.now().isoformat()
        }
    except requests.exceptions.RequestException as e:
        logger.warning(f'Backend health check failed for {base_url}: {e}')
        return {
            'healthy': False,
            'status': 'down',
            'error': str(e),
            'url': base_url,
            'last_check': datetime.now().isoformat()
        }
