"""
Stations Service
Station CRUD, role-scoped station lists and manager assignment rules
"""
import logging

from station_admin.components.companies.service import CompaniesService
from station_admin.components.users.service import UsersService
from station_admin.core.api_client import get_backend_client
from station_admin.core.listing import filter_records, same_id, to_int
from station_admin.core.permissions import is_admin, is_director, is_manager

logger = logging.getLogger(__name__)

STATION_SEARCH_FIELDS = ('name', 'tin', 'company.name', 'manager.username')
EDITABLE_FIELDS = ('name', 'tin', 'domainUrl', 'street')
REQUIRED_FIELDS = (
    ('name', 'Name'),
    ('tin', 'TIN'),
    ('domainUrl', 'Domain URL'),
    ('companyId', 'Company'),
    ('cityId', 'City'),
    ('street', 'Street'),
)


class StationValidationError(ValueError):
    """Submitted station form is incomplete"""


class StationsService:
    """Service for the Stations component"""

    def __init__(self, client=None):
        self.client = client
        self.companies = CompaniesService(client)
        self.users = UsersService(client)

    def _client(self):
        return self.client or get_backend_client()

    def list_stations(self):
        return self._client().get('/stations', 'Failed to fetch stations') or []

    def list_by_company(self, company_id):
        return self._client().get(f'/stations/company/{company_id}', 'Failed to fetch company stations') or []

    def get_station(self, station_id):
        return self._client().get(f'/stations/{station_id}', 'Failed to fetch station')

    def create_station(self, form):
        payload = build_station_payload(form, partial=False)
        return self._client().post('/stations', 'Failed to create station', json=payload)

    def update_station(self, station_id, form):
        payload = build_station_payload(form, partial=True)
        return self._client().put(f'/stations/{station_id}', 'Failed to update station', json=payload)

    def delete_station(self, station_id):
        self._client().delete(f'/stations/{station_id}', 'Failed to delete station')

    def load_for_user(self, user, selected_company_id=None):
        """Stations and selectable companies visible to the user's role

        - admin: every company; all stations or those of the selected company
        - director: their first directed company and its stations
        - manager: only stations they manage
        """
        stations, companies = [], []

        if is_admin(user):
            companies = self.companies.list_companies()
            if selected_company_id:
                stations = self.list_by_company(selected_company_id)
            else:
                stations = self.list_stations()
        elif is_director(user):
            director = self.users.get_logged_in_director()
            companies = director['directedCompanies'] if director else []
            if companies:
                stations = self.list_by_company(companies[0]['id'])
        elif is_manager(user):
            stations = [s for s in self.list_stations() if same_id(s.get('managerId'), user.get('id'))]
        else:
            logger.info(f'Role {user.get("role")} has no station scope')

        return stations, companies


def build_station_payload(form, partial):
    payload = {}
    for name in EDITABLE_FIELDS:
        value = (form.get(name) or '').strip()
        if value:
            payload[name] = value
    for name in ('companyId', 'managerId', 'cityId'):
        value = to_int(form.get(name))
        if value:
            payload[name] = value

    if not partial:
        missing = [label for key, label in REQUIRED_FIELDS if key not in payload]
        if missing:
            raise StationValidationError(f'Missing required fields: {", ".join(missing)}')
    elif not payload:
        raise StationValidationError('Nothing to update')
    return payload


def station_manager_id(station):
    manager = station.get('manager') or {}
    return manager.get('id') or station.get('managerId')


def available_managers(managers, stations, editing_id=None):
    """Managers not yet assigned to another station"""
    assigned = {
        str(station_manager_id(s)) for s in stations
        if station_manager_id(s) and not same_id(s.get('id'), editing_id)
    }
    return [m for m in managers if str(m.get('id')) not in assigned]


def find_manager_conflict(stations, manager_id, editing_id=None):
    """Station already managed by the manager, if any"""
    if not manager_id:
        return None
    for station in stations:
        if same_id(station_manager_id(station), manager_id) and not same_id(station.get('id'), editing_id):
            return station
    return None


def search_stations(stations, term):
    return filter_records(stations, term, STATION_SEARCH_FIELDS)


def company_country_id(companies, company_id):
    """Country of a company, used to preselect the station location"""
    for company in companies:
        if same_id(company.get('id'), company_id):
            return company.get('countryId')
    return None
