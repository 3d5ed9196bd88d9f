"""
Backend REST client
All components talk to the backend through this one client so the bearer
token, timeouts and error message extraction are handled in a single place.
"""
import logging

import requests
from flask import current_app, session

logger = logging.getLogger(__name__)


class BackendError(Exception):
    """Raised for any failed backend call

    ``status_code`` is None when the backend could not be reached at all.
    """

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class BackendClient:
    """Thin wrapper around a requests session bound to one base URL"""

    def __init__(self, base_url, token=None, timeout=10, session=None):
        self.base_url = base_url.rstrip('/')
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, path):
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self):
        headers = {'Accept': 'application/json'}
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'
        return headers

    @staticmethod
    def _error_message(response, default_error):
        try:
            payload = response.json()
        except ValueError:
            return default_error
        if isinstance(payload, dict) and payload.get('message'):
            return payload['message']
        return default_error

    @staticmethod
    def _json(response):
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    def request(self, method, path, default_error='Request failed', **kwargs):
        """Perform a request and return the raw response, raising BackendError on failure"""
        url = self._url(path)
        try:
            response = self.session.request(
                method,
                url,
                headers=self._headers(),
                timeout=self.timeout,
                **kwargs
            )
        except requests.exceptions.RequestException as e:
            logger.error(f'{method} {url} failed: {e}')
            raise BackendError(default_error) from e

        if not response.ok:
            message = self._error_message(response, default_error)
            logger.warning(f'{method} {url} -> HTTP {response.status_code}: {message}')
            raise BackendError(message, response.status_code)

        logger.debug(f'{method} {url} -> HTTP {response.status_code}')
        return response

    def get(self, path, default_error='Request failed', params=None):
        return self._json(self.request('GET', path, default_error, params=params))

    def post(self, path, default_error='Request failed', json=None, data=None, files=None):
        return self._json(self.request('POST', path, default_error, json=json, data=data, files=files))

    def put(self, path, default_error='Request failed', json=None, data=None, files=None):
        return self._json(self.request('PUT', path, default_error, json=json, data=data, files=files))

    def delete(self, path, default_error='Request failed'):
        return self._json(self.request('DELETE', path, default_error))

    def get_raw(self, path, default_error='Request failed'):
        """Fetch binary content, returns (bytes, content type)"""
        response = self.request('GET', path, default_error)
        return response.content, response.headers.get('Content-Type', 'application/octet-stream')


def get_backend_client(base_url_key='API_BASE_URL', token=None):
    """Build a client for the current request using the session token"""
    config = current_app.config
    return BackendClient(
        config[base_url_key],
        token=token or session.get('token'),
        timeout=config['REQUEST_TIMEOUT'],
        session=current_app.extensions.get('backend_session')
    )
