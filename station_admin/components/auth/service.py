"""
Authentication Service
Exchanges credentials for a bearer token with the backend
"""
from station_admin.core.api_client import BackendError, get_backend_client


class AuthService:
    """Service for the login flow"""

    def __init__(self, client=None):
        self.client = client

    def _client(self):
        return self.client or get_backend_client()

    def login(self, username, password):
        """Log in and return ``{'token': ..., 'user': ...}``"""
        if not username or not password:
            raise BackendError('Username and password are required', 400)

        data = self._client().post(
            '/auth/login',
            'Login failed',
            json={'username': username, 'password': password}
        )
        if not data or not data.get('token'):
            raise BackendError('Login failed')
        return {'token': data['token'], 'user': data.get('user')}

    def refresh_user(self):
        """Reload the logged-in user (role and permissions) from the backend"""
        return self._client().get('/auth/me', 'Failed to refresh user data')
