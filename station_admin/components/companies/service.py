"""
Companies Service
Company CRUD, logo upload and director assignment rules
"""
from station_admin.config.settings import DashboardConfig
from station_admin.core.api_client import get_backend_client
from station_admin.core.listing import filter_records, same_id, to_int

COMPANY_SEARCH_FIELDS = ('name', 'email', 'Country.name', 'director.username')
COUNTRY_SEARCH_FIELDS = ('name', 'code')
DIRECTOR_SEARCH_FIELDS = ('username', 'email')


class CompanyValidationError(ValueError):
    """Submitted company form cannot be sent to the backend"""


class CompaniesService:
    """Service for the Companies component"""

    def __init__(self, client=None):
        self.client = client

    def _client(self):
        return self.client or get_backend_client()

    def list_companies(self):
        return self._client().get('/companies', 'Failed to fetch companies') or []

    def get_company(self, company_id):
        return self._client().get(f'/companies/{company_id}', 'Failed to fetch company')

    def create_company(self, form, logo=None):
        data = build_company_form(form, partial=False)
        return self._client().post(
            '/companies',
            'Failed to create company',
            data=data,
            files=logo_files(logo)
        )

    def update_company(self, company_id, form, logo=None):
        """Update a company; only fields present in the form are sent"""
        data = build_company_form(form, partial=True)
        return self._client().put(
            f'/companies/{company_id}',
            'Failed to update company',
            data=data,
            files=logo_files(logo)
        )

    def delete_company(self, company_id):
        self._client().delete(f'/companies/{company_id}', 'Failed to delete company')

    def fetch_logo(self, company_id):
        """Logo bytes and content type, streamed with the session token"""
        return self._client().get_raw(f'/companies/{company_id}/logo', 'Failed to fetch logo')


def build_company_form(form, partial):
    """Multipart fields for create/update

    ``partial`` drops empty fields instead of rejecting them.
    """
    data = {}
    name = (form.get('name') or '').strip()
    email = (form.get('email') or '').strip()
    country_id = to_int(form.get('countryId'))
    director_id = to_int(form.get('directorId'))

    if name:
        data['name'] = name
    if email:
        data['email'] = email
    if country_id:
        data['countryId'] = str(country_id)
    if director_id:
        data['directorId'] = str(director_id)

    if not partial:
        missing = [label for key, label in (('name', 'Company name'), ('email', 'Email'), ('countryId', 'Country'))
                   if key not in data]
        if missing:
            raise CompanyValidationError(f'{", ".join(missing)} required')
    return data


def logo_files(logo):
    """``files`` argument for requests, None when no logo was chosen"""
    if logo is None or not getattr(logo, 'filename', None):
        return None
    validate_logo(logo)
    return {'logo': (logo.filename, logo.stream, logo.mimetype or 'application/octet-stream')}


def validate_logo(logo, max_bytes=None):
    """Reject non-image and oversized logo uploads"""
    max_bytes = max_bytes or DashboardConfig.MAX_LOGO_BYTES
    mimetype = getattr(logo, 'mimetype', '') or ''
    if mimetype and not mimetype.startswith('image/'):
        raise CompanyValidationError('Logo must be an image file')

    stream = logo.stream
    stream.seek(0, 2)
    size = stream.tell()
    stream.seek(0)
    if size > max_bytes:
        raise CompanyValidationError('Logo file size must be less than 5MB')
    return size


def assigned_director_ids(companies):
    return {str(company['directorId']) for company in companies if company.get('directorId')}


def available_directors(directors, companies, editing_id=None):
    """Directors not yet running a company

    The director of the company being edited stays available.
    """
    assigned = assigned_director_ids(companies)
    keep = None
    if editing_id is not None:
        editing = next((c for c in companies if same_id(c.get('id'), editing_id)), None)
        keep = editing.get('directorId') if editing else None
    return [d for d in directors if str(d.get('id')) not in assigned or same_id(d.get('id'), keep)]


def find_director_conflict(companies, director_id, editing_id=None):
    """Another company already assigned to the director, if any"""
    if not director_id:
        return None
    for company in companies:
        if same_id(company.get('directorId'), director_id) and not same_id(company.get('id'), editing_id):
            return company
    return None


def search_companies(companies, term):
    return filter_records(companies, term, COMPANY_SEARCH_FIELDS)


def search_countries(countries, term):
    return filter_records(countries, term, COUNTRY_SEARCH_FIELDS)


def search_directors(directors, term):
    return filter_records(directors, term, DIRECTOR_SEARCH_FIELDS)
