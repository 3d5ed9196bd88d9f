"""
Locations Service
Countries, regions and cities served by the backend location API
"""
from station_admin.core.api_client import get_backend_client
from station_admin.core.listing import filter_records, same_id, to_int

# kind -> (collection path, display label)
LOCATION_KINDS = {
    'country': ('countries', 'country'),
    'region': ('regions', 'region'),
    'city': ('cities', 'city'),
}

COUNTRY_CODE_LENGTH = 2


class LocationValidationError(ValueError):
    """Submitted location form is incomplete"""


class LocationsService:
    """Service for the Locations component"""

    def __init__(self, client=None):
        self.client = client

    def _client(self):
        return self.client or get_backend_client('LOCATION_API_URL')

    def list_countries(self):
        return self._client().get('/countries', 'Failed to fetch countries') or []

    def list_regions(self):
        return self._client().get('/regions', 'Failed to fetch regions') or []

    def list_cities(self):
        return self._client().get('/cities', 'Failed to fetch cities') or []

    def regions_for_country(self, country_id):
        return [r for r in self.list_regions() if same_id(r.get('countryId'), country_id)]

    def cities_for_region(self, region_id):
        return [c for c in self.list_cities() if same_id(c.get('regionId'), region_id)]

    def create(self, kind, form):
        collection, label = _kind(kind)
        payload = build_location_payload(kind, form)
        return self._client().post(f'/{collection}', f'Failed to create {label}', json=payload)

    def update(self, kind, location_id, form):
        collection, label = _kind(kind)
        payload = build_location_payload(kind, form)
        return self._client().put(f'/{collection}/{location_id}', f'Failed to update {label}', json=payload)

    def delete(self, kind, location_id):
        collection, label = _kind(kind)
        self._client().delete(f'/{collection}/{location_id}', f'Failed to delete {label}')


def _kind(kind):
    try:
        return LOCATION_KINDS[kind]
    except KeyError:
        raise LocationValidationError(f'Unknown location type: {kind}')


def build_location_payload(kind, form):
    """Validate a location form and build the JSON body for it"""
    _kind(kind)
    name = (form.get('name') or '').strip()
    if not name:
        raise LocationValidationError('Name is required')

    if kind == 'country':
        code = (form.get('code') or '').strip()
        if not code:
            raise LocationValidationError('Country code is required')
        if len(code) > COUNTRY_CODE_LENGTH:
            raise LocationValidationError(f'Country code must be at most {COUNTRY_CODE_LENGTH} characters')
        return {'name': name, 'code': code}

    if kind == 'region':
        country_id = to_int(form.get('countryId'))
        if not country_id:
            raise LocationValidationError('Please select a country')
        return {'name': name, 'countryId': country_id}

    region_id = to_int(form.get('regionId'))
    if not region_id:
        raise LocationValidationError('Please select a region')
    return {'name': name, 'regionId': region_id}


def lookup_name(records, record_id):
    """Name of the record with the given id, 'Unknown' when absent"""
    for record in records:
        if same_id(record.get('id'), record_id):
            return record.get('name')
    return 'Unknown'


def search_locations(countries, regions, cities, term):
    return (
        filter_records(countries, term, ('name', 'code')),
        filter_records(regions, term, ('name',)),
        filter_records(cities, term, ('name',)),
    )
