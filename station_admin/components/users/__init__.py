"""
Users Component
User accounts, role permissions and user permission overrides
"""
from .routes import users_bp, init_users
from .service import UsersService

__all__ = ['users_bp', 'init_users', 'UsersService']
