"""
Stations Component
"""
from .routes import stations_bp, init_stations
from .service import StationsService

__all__ = ['stations_bp', 'init_stations', 'StationsService']
