"""
Sidebar navigation
"""
from .permissions import has_any_permission

MENU_ITEMS = [
    {
        'title': 'Dashboard',
        'endpoint': 'dashboard_overview.dashboard',
        'permission': ['dashboard:view'],
    },
    {
        'title': 'Stations',
        'endpoint': 'stations.stations_page',
        'permission': ['stations:manage', 'stations:read_stations'],
    },
    {
        'title': 'Companies',
        'endpoint': 'companies.companies_page',
        'permission': ['companies:manage'],
    },
    {
        'title': 'Locations',
        'endpoint': 'locations.locations_page',
        'permission': ['locations:manage'],
    },
    {
        'title': 'Users',
        'endpoint': 'users.users_page',
        'permission': ['users:manage'],
    },
]


def visible_menu(user):
    """Menu items the user may see"""
    return [item for item in MENU_ITEMS if has_any_permission(item['permission'], user)]


def landing_endpoint(user):
    """First page the user may open, the dashboard when none is visible"""
    items = visible_menu(user)
    return items[0]['endpoint'] if items else 'dashboard_overview.dashboard'
