"""
Locations Component
Geographic reference data: countries, regions and cities
"""
from .routes import locations_bp, init_locations
from .service import LocationsService

__all__ = ['locations_bp', 'init_locations', 'LocationsService']
