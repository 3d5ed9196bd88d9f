"""
Companies Routes
"""
from flask import Blueprint, Response, abort, flash, redirect, render_template, request, url_for

from station_admin.components.locations.service import LocationsService
from station_admin.components.users.service import UsersService
from station_admin.core.api_client import BackendError
from station_admin.core.listing import same_id, to_int
from station_admin.core.monitoring import add_log
from station_admin.core.permissions import current_user, has_permission, login_required, permission_required
from .service import (
    CompaniesService,
    CompanyValidationError,
    available_directors,
    find_director_conflict,
    search_companies,
    search_countries,
    search_directors,
)

companies_bp = Blueprint('companies', __name__)

# Service instances
service = CompaniesService()
locations = LocationsService()
users = UsersService()


@companies_bp.route('/companies')
@permission_required('companies:manage')
def companies_page():
    """Companies table with the add/edit form"""
    user = current_user()
    term = request.args.get('q', '')
    editing_id = to_int(request.args.get('edit'))

    try:
        companies = service.list_companies()
        countries = locations.list_countries()
        directors = users.list_directors()
    except BackendError as e:
        add_log('ERROR', f'Failed to load companies page: {e.message}')
        flash('Failed to load data', 'error')
        companies, countries, directors = [], [], []

    editing = next((c for c in companies if same_id(c.get('id'), editing_id)), None)
    free_directors = available_directors(directors, companies, editing['id'] if editing else None)

    return render_template(
        'companies.html',
        companies=search_companies(companies, term),
        search_term=term,
        countries=search_countries(countries, request.args.get('country_q', '')),
        directors=search_directors(free_directors, request.args.get('director_q', '')),
        no_directors_left=not free_directors,
        editing=editing,
        show_form=editing is not None or request.args.get('new') == '1',
        can_create=has_permission('companies:create', user),
        can_update=has_permission('companies:update', user),
        can_delete=has_permission('companies:delete', user),
    )


def _check_director(director_id, editing_id=None):
    """Flash and return False when the director already runs another company"""
    if not director_id:
        return True
    conflict = find_director_conflict(service.list_companies(), director_id, editing_id)
    if conflict:
        flash(f'This director is already assigned to company: {conflict.get("name")}', 'error')
        return False
    return True


@companies_bp.route('/companies', methods=['POST'])
@permission_required('companies:create')
def create_company():
    try:
        if _check_director(to_int(request.form.get('directorId'))):
            service.create_company(request.form, request.files.get('logo'))
            add_log('INFO', f'Company {request.form.get("name")} created')
            flash('Company created successfully', 'success')
            return redirect(url_for('companies.companies_page'))
    except CompanyValidationError as e:
        flash(str(e), 'error')
    except BackendError as e:
        add_log('ERROR', f'Failed to create company: {e.message}')
        flash(e.message or 'Operation failed', 'error')
    return redirect(url_for('companies.companies_page', new=1))


@companies_bp.route('/companies/<int:company_id>/edit', methods=['POST'])
@permission_required('companies:update')
def update_company(company_id):
    try:
        if _check_director(to_int(request.form.get('directorId')), company_id):
            service.update_company(company_id, request.form, request.files.get('logo'))
            add_log('INFO', f'Company {company_id} updated')
            flash('Company updated successfully', 'success')
            return redirect(url_for('companies.companies_page'))
    except CompanyValidationError as e:
        flash(str(e), 'error')
    except BackendError as e:
        add_log('ERROR', f'Failed to update company {company_id}: {e.message}')
        flash(e.message or 'Operation failed', 'error')
    return redirect(url_for('companies.companies_page', edit=company_id))


@companies_bp.route('/companies/<int:company_id>/delete', methods=['POST'])
@permission_required('companies:delete')
def delete_company(company_id):
    try:
        service.delete_company(company_id)
        add_log('INFO', f'Company {company_id} deleted')
        flash('Company deleted successfully', 'success')
    except BackendError as e:
        add_log('ERROR', f'Failed to delete company {company_id}: {e.message}')
        flash('Failed to delete company', 'error')
    return redirect(url_for('companies.companies_page'))


@companies_bp.route('/companies/<int:company_id>/logo')
@login_required
def company_logo(company_id):
    """Proxy the company logo so the token never appears in a URL"""
    try:
        content, content_type = service.fetch_logo(company_id)
    except BackendError:
        abort(404)
    return Response(content, mimetype=content_type, headers={'Cache-Control': 'private, max-age=300'})


def init_companies(app):
    """Initialize companies component with Flask app"""
    app.register_blueprint(companies_bp)
    return companies_bp
