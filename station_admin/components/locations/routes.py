"""
Locations Routes
Country/region/city tables plus JSON lookups for cascading selects
"""
from flask import Blueprint, flash, jsonify, redirect, render_template, request, url_for

from station_admin.core.api_client import BackendError
from station_admin.core.listing import to_int
from station_admin.core.monitoring import add_log
from station_admin.core.permissions import login_required, permission_required
from .service import LOCATION_KINDS, LocationsService, LocationValidationError, lookup_name, search_locations

locations_bp = Blueprint('locations', __name__)

# Service instance
service = LocationsService()


@locations_bp.route('/locations')
@permission_required('locations:manage')
def locations_page():
    """Countries, regions and cities tables"""
    term = request.args.get('q', '')
    try:
        countries = service.list_countries()
        regions = service.list_regions()
        cities = service.list_cities()
    except BackendError as e:
        add_log('ERROR', f'Failed to load locations: {e.message}')
        flash('Failed to load data', 'error')
        countries, regions, cities = [], [], []

    shown_countries, shown_regions, shown_cities = search_locations(countries, regions, cities, term)
    adding = request.args.get('add')

    return render_template(
        'locations.html',
        search_term=term,
        all_countries=countries,
        all_regions=regions,
        countries=shown_countries,
        regions=shown_regions,
        cities=shown_cities,
        country_name=lambda country_id: lookup_name(countries, country_id),
        region_name=lambda region_id: lookup_name(regions, region_id),
        adding=adding if adding in LOCATION_KINDS else None,
        edit_kind=request.args.get('edit_kind'),
        edit_id=to_int(request.args.get('edit')),
    )


@locations_bp.route('/locations/<kind>', methods=['POST'])
@permission_required('locations:manage')
def create_location(kind):
    try:
        service.create(kind, request.form)
        add_log('INFO', f'{kind.capitalize()} {request.form.get("name")} created')
        flash('Added successfully', 'success')
        return redirect(url_for('locations.locations_page'))
    except LocationValidationError as e:
        flash(str(e), 'error')
    except BackendError as e:
        add_log('ERROR', f'Failed to add {kind}: {e.message}')
        flash('Failed to add item', 'error')
    return redirect(url_for('locations.locations_page', add=kind))


@locations_bp.route('/locations/<kind>/<int:location_id>/edit', methods=['POST'])
@permission_required('locations:manage')
def update_location(kind, location_id):
    try:
        service.update(kind, location_id, request.form)
        add_log('INFO', f'{kind.capitalize()} {location_id} updated')
        flash('Updated successfully', 'success')
        return redirect(url_for('locations.locations_page'))
    except LocationValidationError as e:
        flash(str(e), 'error')
    except BackendError as e:
        add_log('ERROR', f'Failed to update {kind} {location_id}: {e.message}')
        flash('Failed to update item', 'error')
    return redirect(url_for('locations.locations_page', edit_kind=kind, edit=location_id))


@locations_bp.route('/locations/<kind>/<int:location_id>/delete', methods=['POST'])
@permission_required('locations:manage')
def delete_location(kind, location_id):
    try:
        service.delete(kind, location_id)
        add_log('INFO', f'{kind.capitalize()} {location_id} deleted')
        flash('Deleted successfully', 'success')
    except LocationValidationError as e:
        flash(str(e), 'error')
    except BackendError as e:
        add_log('ERROR', f'Failed to delete {kind} {location_id}: {e.message}')
        flash('Failed to delete item', 'error')
    return redirect(url_for('locations.locations_page'))


@locations_bp.route('/api/locations/regions')
@login_required
def api_regions():
    """Regions of one country, for the station form"""
    country_id = to_int(request.args.get('country_id'))
    if country_id is None:
        return jsonify({'error': 'country_id is required'}), 400
    try:
        return jsonify(service.regions_for_country(country_id))
    except BackendError as e:
        return jsonify({'error': e.message}), e.status_code or 502


@locations_bp.route('/api/locations/cities')
@login_required
def api_cities():
    """Cities of one region, for the station form"""
    region_id = to_int(request.args.get('region_id'))
    if region_id is None:
        return jsonify({'error': 'region_id is required'}), 400
    try:
        return jsonify(service.cities_for_region(region_id))
    except BackendError as e:
        return jsonify({'error': e.message}), e.status_code or 502


def init_locations(app):
    """Initialize locations component with Flask app"""
    app.register_blueprint(locations_bp)
    return locations_bp
