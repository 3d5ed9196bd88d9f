"""
Station Admin Dashboard
Flask application serving the station/company administration pages
"""
import logging
import os

import requests
from flask import Flask, jsonify, render_template, request
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from station_admin.config.settings import DashboardConfig
from station_admin.core.monitoring import add_log
from station_admin.routes.main_routes import main_bp

from station_admin.components.auth import init_auth
from station_admin.components.dashboard_overview import init_dashboard_overview
from station_admin.components.companies import init_companies
from station_admin.components.stations import init_stations
from station_admin.components.locations import init_locations
from station_admin.components.users import init_users
from station_admin.components.activity_log import init_activity_log

logger = logging.getLogger(__name__)

PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))


class DashboardApp:
    """Main dashboard application class"""

    def __init__(self, config_overrides=None):
        self.app = None
        self.limiter = None
        self.config_overrides = config_overrides or {}

    def create_app(self):
        """Create and configure Flask application"""
        self.app = Flask(
            __name__,
            template_folder=os.path.join(PACKAGE_DIR, 'templates'),
            static_folder=os.path.join(PACKAGE_DIR, 'static')
        )

        # Load configuration
        self.app.config.from_object(DashboardConfig)
        self.app.config.update(self.config_overrides)

        # Initialize extensions
        self.limiter = Limiter(
            key_func=get_remote_address,
            app=self.app,
            default_limits=[self.app.config['RATELIMIT_DEFAULT']],
            storage_uri=self.app.config['RATELIMIT_STORAGE_URI']
        )

        # One pooled HTTP session for all backend calls; tokens are sent per request
        self.app.extensions.setdefault('backend_session', requests.Session())

        # Initialize components
        init_auth(self.app, self.limiter)
        init_dashboard_overview(self.app)
        init_companies(self.app)
        init_stations(self.app)
        init_locations(self.app)
        init_users(self.app)
        init_activity_log(self.app)

        # Register main blueprint
        self.app.register_blueprint(main_bp)

        self._register_error_handlers()

        return self.app

    def _register_error_handlers(self):
        app = self.app

        def render_error(code, title, message):
            if request.path.startswith('/api/'):
                return jsonify({'error': message}), code
            return render_template('error.html', code=code, title=title, message=message), code

        @app.errorhandler(403)
        def forbidden(error):
            return render_error(403, 'Access denied', 'You do not have permission to view this page.')

        @app.errorhandler(404)
        def not_found(error):
            return render_error(404, 'Not found', 'The page you requested does not exist.')

        @app.errorhandler(413)
        def too_large(error):
            return render_error(413, 'Upload too large', 'The uploaded file is too large.')

        @app.errorhandler(429)
        def rate_limited(error):
            add_log('WARNING', f'Rate limit exceeded by {get_remote_address()} on {request.path}')
            return render_error(429, 'Too many requests', 'Please wait a moment and try again.')

    def run(self):
        """Start the dashboard application"""
        config = self.app.config
        add_log('INFO', 'Station admin dashboard started')

        logger.info("=" * 60)
        logger.info("Station Admin Dashboard")
        logger.info(f"Starting on: http://localhost:{config['DASHBOARD_PORT']}")
        logger.info(f"Backend API:  {config['API_BASE_URL']}")
        logger.info(f"Location API: {config['LOCATION_API_URL']}")
        logger.info("Architecture: Component-based routes")
        logger.info("=" * 60)

        # Run the application
        self.app.run(host=config['DASHBOARD_HOST'], port=config['DASHBOARD_PORT'], debug=False)


def create_app(config_overrides=None):
    """Application factory, also usable as ``flask --app station_admin.dashboard_app run``"""
    return DashboardApp(config_overrides).create_app()


def main():
    """Main entry point"""
    logging.basicConfig(
        level=getattr(logging, DashboardConfig.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    dashboard = DashboardApp()
    dashboard.create_app()
    dashboard.run()


if __name__ == '__main__':
    main()
