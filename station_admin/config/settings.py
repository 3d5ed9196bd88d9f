"""
Dashboard configuration settings
"""
import os
from datetime import timedelta


class DashboardConfig:
    """Centralized configuration for dashboard"""

    # Flask settings
    SECRET_KEY = os.environ.get('SECRET_KEY', 'your-secret-key-here-change-in-production')
    PERMANENT_SESSION_LIFETIME = timedelta(hours=8)
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    # Upload limit for multipart requests (logo plus form fields)
    MAX_CONTENT_LENGTH = 8 * 1024 * 1024

    # Rate limiting
    RATELIMIT_STORAGE_URI = "memory://"
    RATELIMIT_DEFAULT = "100 per minute"
    LOGIN_RATE_LIMIT = "10 per minute"

    # Backend REST service
    API_BASE_URL = os.environ.get('API_BASE_URL', 'http://localhost:5000/api')
    LOCATION_API_URL = os.environ.get('LOCATION_API_URL', 'http://localhost:5000/location/location')
    REQUEST_TIMEOUT = float(os.environ.get('REQUEST_TIMEOUT', 10))
    HEALTH_CHECK_TIMEOUT = 3

    # Server
    DASHBOARD_HOST = os.environ.get('DASHBOARD_HOST', '0.0.0.0')
    DASHBOARD_PORT = int(os.environ.get('DASHBOARD_PORT', 8081))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Companies
    MAX_LOGO_BYTES = 5 * 1024 * 1024

    # Listing settings
    STATION_PAGE_SIZES = (5, 10, 20)
    STATION_DEFAULT_PAGE_SIZE = 5
    USER_PAGE_SIZES = (5, 10, 25, 50)
    USER_DEFAULT_PAGE_SIZE = 10
    PERMISSIONS_PAGE_SIZE = 8
    MAX_VISIBLE_PAGES = 5

    # UI settings
    MAX_LOG_ENTRIES = 1000
