"""
Stations Routes
"""
from flask import Blueprint, current_app, flash, redirect, render_template, request, url_for

from station_admin.components.locations.service import LocationsService
from station_admin.core.api_client import BackendError
from station_admin.core.listing import paginate, same_id, to_int
from station_admin.core.monitoring import add_log
from station_admin.core.permissions import current_user, has_permission, is_admin, permission_required
from .service import (
    StationsService,
    StationValidationError,
    available_managers,
    company_country_id,
    find_manager_conflict,
    search_stations,
)

stations_bp = Blueprint('stations', __name__)

# Service instances
service = StationsService()
locations = LocationsService()

STATION_VIEW_PERMISSIONS = ('stations:manage', 'stations:read_stations')


@stations_bp.route('/stations')
@permission_required(*STATION_VIEW_PERMISSIONS)
def stations_page():
    """Station cards with search, pagination and the add form"""
    user = current_user()
    selected_company = to_int(request.args.get('company')) if is_admin(user) else None
    term = request.args.get('q', '')
    sizes, default_size = current_app.config['STATION_PAGE_SIZES'], current_app.config['STATION_DEFAULT_PAGE_SIZE']
    can_create = has_permission('stations:create', user)

    try:
        stations, companies = service.load_for_user(user, selected_company)
    except BackendError as e:
        add_log('ERROR', f'Failed to load stations: {e.message}')
        flash('Failed to load data', 'error')
        stations, companies = [], []

    page = paginate(
        search_stations(stations, term),
        to_int(request.args.get('page'), 1),
        to_int(request.args.get('per_page'), default_size),
        allowed_sizes=sizes,
        default_size=default_size,
        max_visible=current_app.config['MAX_VISIBLE_PAGES']
    )

    form = None
    if can_create and request.args.get('new') == '1':
        form = _station_form_context(companies, selected_company)

    return render_template(
        'stations.html',
        page=page,
        page_sizes=sizes,
        search_term=term,
        companies=companies,
        selected_company=selected_company,
        show_company_filter=is_admin(user),
        editing_id=to_int(request.args.get('edit')),
        form=form,
        can_create=can_create,
        can_update=has_permission('stations:update', user),
        can_delete=has_permission('stations:delete', user),
    )


def _station_form_context(companies, selected_company):
    """Choices for the add-station form, including the cascading location selects

    The company's country always wins over a submitted ``country``, and a
    ``region`` outside the chosen country is dropped.
    """
    company_id = to_int(request.args.get('companyId')) or selected_company
    company_country = company_country_id(companies, company_id)
    country_id = company_country or to_int(request.args.get('country'))
    region_id = to_int(request.args.get('region'))

    try:
        managers = available_managers(service.users.list_managers(), service.list_stations())
        countries = locations.list_countries()
        regions = locations.regions_for_country(country_id) if country_id else []
        if not any(same_id(region.get('id'), region_id) for region in regions):
            region_id = None
        cities = locations.cities_for_region(region_id) if region_id else []
    except BackendError as e:
        add_log('ERROR', f'Failed to load station form data: {e.message}')
        flash('Failed to load form data', 'error')
        managers, countries, regions, cities = [], [], [], []

    return {
        'company_id': company_id,
        'country_id': country_id,
        'region_id': region_id,
        'country_locked': company_country is not None,
        'managers': managers,
        'countries': countries,
        'regions': regions,
        'cities': cities,
    }


@stations_bp.route('/stations', methods=['POST'])
@permission_required('stations:create')
def create_station():
    manager_id = to_int(request.form.get('managerId'))
    try:
        conflict = find_manager_conflict(service.list_stations(), manager_id)
        if conflict:
            flash(f'This manager is already assigned to station: {conflict.get("name")}', 'error')
        else:
            service.create_station(request.form)
            add_log('INFO', f'Station {request.form.get("name")} created')
            flash('Station created successfully', 'success')
            return redirect(url_for('stations.stations_page'))
    except StationValidationError as e:
        flash(str(e), 'error')
    except BackendError as e:
        add_log('ERROR', f'Failed to create station: {e.message}')
        flash('Failed to create station', 'error')
    return redirect(url_for('stations.stations_page', new=1, companyId=request.form.get('companyId')))


@stations_bp.route('/stations/<int:station_id>/edit', methods=['POST'])
@permission_required('stations:update')
def update_station(station_id):
    try:
        service.update_station(station_id, request.form)
        add_log('INFO', f'Station {station_id} updated')
        flash('Station updated successfully', 'success')
    except StationValidationError as e:
        flash(str(e), 'error')
        return redirect(url_for('stations.stations_page', edit=station_id))
    except BackendError as e:
        add_log('ERROR', f'Failed to update station {station_id}: {e.message}')
        flash('Failed to update station', 'error')
    return redirect(url_for('stations.stations_page'))


@stations_bp.route('/stations/<int:station_id>/delete', methods=['POST'])
@permission_required('stations:delete')
def delete_station(station_id):
    try:
        service.delete_station(station_id)
        add_log('INFO', f'Station {station_id} deleted')
        flash('Station deleted successfully', 'success')
    except BackendError as e:
        add_log('ERROR', f'Failed to delete station {station_id}: {e.message}')
        flash('Failed to delete station', 'error')
    return redirect(url_for('stations.stations_page'))


def init_stations(app):
    """Initialize stations component with Flask app"""
    app.register_blueprint(stations_bp)
    return stations_bp
