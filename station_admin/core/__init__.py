"""
Core services shared by dashboard components
"""
from .api_client import BackendClient, BackendError, get_backend_client
from .monitoring import system_logs, add_log, get_logs, check_backend_health
from .permissions import (
    has_permission,
    has_any_permission,
    role_name,
    is_admin,
    is_director,
    is_manager,
    current_user,
    login_required,
    permission_required,
)

__all__ = [
    'BackendClient',
    'BackendError',
    'get_backend_client',
    'system_logs',
    'add_log',
    'get_logs',
    'check_backend_health',
    'has_permission',
    'has_any_permission',
    'role_name',
    'is_admin',
    'is_director',
    'is_manager',
    'current_user',
    'login_required',
    'permission_required',
]
