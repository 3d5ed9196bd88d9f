"""
Auth Component
Login, logout and session user refresh
"""
from .routes import auth_bp, init_auth
from .service import AuthService

__all__ = ['auth_bp', 'init_auth', 'AuthService']
