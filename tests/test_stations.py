"""
Tests for role-scoped station loading, manager assignment and the stations pages.
"""

from __future__ import annotations

import pytest

from conftest import API, LOCATION_API, FakeSession, make_user
from station_admin.components.stations.service import (
    StationValidationError,
    StationsService,
    available_managers,
    build_station_payload,
    find_manager_conflict,
    search_stations,
)
from station_admin.core.api_client import BackendClient

STATIONS = [
    {"id": 1, "name": "North Station", "tin": "111", "companyId": 1, "managerId": 20,
     "company": {"name": "Alpha Fuel"}, "manager": {"id": 20, "username": "max"}},
    {"id": 2, "name": "South Station", "tin": "222", "companyId": 2, "managerId": None,
     "company": {"name": "Beta Oil"}},
]
MANAGERS = [
    {"id": 20, "username": "max", "email": "max@x.com", "role": "manager"},
    {"id": 21, "username": "mo", "email": "mo@x.com", "role": "manager"},
]
COMPANIES = [{"id": 1, "name": "Alpha Fuel", "countryId": 4}, {"id": 2, "name": "Beta Oil", "countryId": 5}]


@pytest.fixture
def station_service():
    session = FakeSession()
    return session, StationsService(BackendClient(API, token="t", session=session))


class TestLoadForUser:
    def test_admin_sees_all_stations(self, station_service) -> None:
        session, service = station_service
        session.add("GET", f"{API}/stations", STATIONS)
        session.add("GET", f"{API}/companies", COMPANIES)

        stations, companies = service.load_for_user({"role": "admin"})

        assert len(stations) == 2
        assert companies == COMPANIES

    def test_admin_company_filter(self, station_service) -> None:
        session, service = station_service
        session.add("GET", f"{API}/stations/company/2", [STATIONS[1]])
        session.add("GET", f"{API}/companies", COMPANIES)

        stations, _ = service.load_for_user({"role": "admin"}, selected_company_id=2)

        assert [s["id"] for s in stations] == [2]

    def test_director_sees_first_directed_company(self, station_service) -> None:
        session, service = station_service
        session.add("GET", f"{API}/users/me", {"id": 10, "role": "director", "companies": [COMPANIES[0]]})
        session.add("GET", f"{API}/stations/company/1", [STATIONS[0]])

        stations, companies = service.load_for_user({"id": 10, "role": "director"})

        assert [s["id"] for s in stations] == [1]
        assert companies == [COMPANIES[0]]

    def test_director_without_company(self, station_service) -> None:
        session, service = station_service
        session.add("GET", f"{API}/users/me", {"id": 10, "role": "director", "companies": []})

        assert service.load_for_user({"id": 10, "role": "director"}) == ([], [])

    def test_manager_sees_only_managed_stations(self, station_service) -> None:
        session, service = station_service
        session.add("GET", f"{API}/stations", STATIONS)

        stations, companies = service.load_for_user({"id": "20", "role": "manager"})

        assert [s["id"] for s in stations] == [1]
        assert companies == []

    def test_other_roles_see_nothing(self, station_service) -> None:
        session, service = station_service
        assert service.load_for_user({"role": "auditor"}) == ([], [])
        assert session.calls == []


class TestStationPayload:
    def test_create_requires_all_fields(self) -> None:
        with pytest.raises(StationValidationError) as excinfo:
            build_station_payload({"name": "X", "tin": "1"}, partial=False)
        assert "Domain URL" in str(excinfo.value)
        assert "City" in str(excinfo.value)

    def test_ids_are_integers(self) -> None:
        payload = build_station_payload({
            "name": "X", "tin": "1", "domainUrl": "https://x.test", "street": "Main 1",
            "companyId": "1", "cityId": "9", "managerId": "",
        }, partial=False)
        assert payload["companyId"] == 1
        assert payload["cityId"] == 9
        assert "managerId" not in payload

    def test_empty_update_is_rejected(self) -> None:
        with pytest.raises(StationValidationError, match="Nothing to update"):
            build_station_payload({"name": " "}, partial=True)


class TestManagerAssignment:
    def test_assigned_managers_are_hidden(self) -> None:
        assert [m["id"] for m in available_managers(MANAGERS, STATIONS)] == [21]
        assert [m["id"] for m in available_managers(MANAGERS, STATIONS, editing_id=1)] == [20, 21]

    def test_conflict_detection(self) -> None:
        assert find_manager_conflict(STATIONS, 20)["name"] == "North Station"
        assert find_manager_conflict(STATIONS, 20, editing_id=1) is None
        assert find_manager_conflict(STATIONS, 21) is None

    def test_search_by_company_and_manager(self) -> None:
        assert [s["id"] for s in search_stations(STATIONS, "beta")] == [2]
        assert [s["id"] for s in search_stations(STATIONS, "MAX")] == [1]


class TestStationRoutes:
    def test_page_paginates_cards(self, client, backend, login_as, admin_user) -> None:
        login_as(admin_user)
        many = [dict(STATIONS[1], id=i, name=f"Station {i:02d}") for i in range(1, 13)]
        backend.add("GET", f"{API}/stations", many)
        backend.add("GET", f"{API}/companies", COMPANIES)

        response = client.get("/stations?page=2")

        assert response.status_code == 200
        assert b"Station 06" in response.data
        assert b"Station 05" not in response.data
        assert b"Showing 6 to 10 of 12" in response.data

    def test_manager_can_read(self, client, backend, login_as) -> None:
        login_as(make_user(user_id=20, role="manager", permissions=["stations:read_stations"]))
        backend.add("GET", f"{API}/stations", STATIONS)

        response = client.get("/stations")

        assert response.status_code == 200
        assert b"North Station" in response.data
        assert b"South Station" not in response.data
        assert b"Add Station" not in response.data

    def test_new_form_loads_location_choices(self, client, backend, login_as, admin_user) -> None:
        login_as(admin_user)
        backend.add("GET", f"{API}/stations", STATIONS)
        backend.add("GET", f"{API}/companies", COMPANIES)
        backend.add("GET", f"{API}/users", MANAGERS)
        backend.add("GET", f"{LOCATION_API}/countries", [{"id": 4, "name": "Norway"}])
        backend.add("GET", f"{LOCATION_API}/regions", [{"id": 7, "name": "Oslo", "countryId": 4}])
        backend.add("GET", f"{LOCATION_API}/cities", [{"id": 9, "name": "Oslo City", "regionId": 7}])

        response = client.get("/stations?new=1&companyId=1&region=7")

        assert b"Add New Station" in response.data
        assert b"Oslo City" in response.data
        assert b"mo (mo@x.com)" in response.data
        assert b"max (max@x.com)" not in response.data

    def test_create_with_taken_manager_is_refused(self, client, backend, login_as, admin_user) -> None:
        login_as(admin_user)
        backend.add("GET", f"{API}/stations", STATIONS)

        client.post("/stations", data={"name": "New", "managerId": "20"})

        assert backend.calls_to("POST", f"{API}/stations") == []
        with client.session_transaction() as sess:
            assert ("error", "This manager is already assigned to station: North Station") in sess["_flashes"]

    def test_create_station(self, client, backend, login_as, admin_user) -> None:
        login_as(admin_user)
        backend.add("GET", f"{API}/stations", STATIONS)
        backend.add("POST", f"{API}/stations", {"id": 3})

        response = client.post("/stations", data={
            "name": "New", "tin": "333", "domainUrl": "https://new.test", "street": "Main 1",
            "companyId": "1", "cityId": "9", "managerId": "21",
        })

        assert response.headers["Location"].endswith("/stations")
        assert backend.calls_to("POST", f"{API}/stations")[0]["json"]["managerId"] == 21

    def test_company_country_overrides_stale_location(self, client, backend, login_as, admin_user) -> None:
        login_as(admin_user)
        backend.add("GET", f"{API}/stations", STATIONS)
        backend.add("GET", f"{API}/companies", COMPANIES)
        backend.add("GET", f"{API}/users", MANAGERS)
        backend.add("GET", f"{LOCATION_API}/countries", [{"id": 4, "name": "Norway"}, {"id": 5, "name": "Denmark"}])
        backend.add("GET", f"{LOCATION_API}/regions", [
            {"id": 7, "name": "Oslo", "countryId": 4},
            {"id": 8, "name": "Zealand", "countryId": 5},
        ])
        backend.add("GET", f"{LOCATION_API}/cities", [{"id": 9, "name": "Oslo City", "regionId": 7}])

        response = client.get("/stations?new=1&companyId=2&country=4&region=7")

        assert b'<option value="5" selected>Denmark</option>' in response.data
        assert b'<option value="4" selected>' not in response.data
        assert b"Zealand" in response.data
        assert b"Oslo City" not in response.data

    def test_inline_edit_sends_changed_fields(self, client, backend, login_as, admin_user) -> None:
        login_as(admin_user)
        backend.add("PUT", f"{API}/stations/1", {"id": 1})

        response = client.post("/stations/1/edit", data={
            "name": " North Renamed ", "tin": "111", "domainUrl": "", "street": "Harbour 2",
        })

        assert response.headers["Location"].endswith("/stations")
        assert backend.calls_to("PUT", f"{API}/stations/1")[0]["json"] == {
            "name": "North Renamed", "tin": "111", "street": "Harbour 2",
        }
        with client.session_transaction() as sess:
            assert ("success", "Station updated successfully") in sess["_flashes"]

    def test_inline_edit_with_nothing_to_update(self, client, backend, login_as, admin_user) -> None:
        login_as(admin_user)

        response = client.post("/stations/1/edit", data={"name": "  ", "tin": ""})

        assert "edit=1" in response.headers["Location"]
        assert backend.calls_to("PUT", f"{API}/stations/1") == []
        with client.session_transaction() as sess:
            assert ("error", "Nothing to update") in sess["_flashes"]

    def test_inline_edit_backend_failure(self, client, backend, login_as, admin_user) -> None:
        login_as(admin_user)
        backend.add("PUT", f"{API}/stations/1", {"message": "TIN taken"}, status=409)

        response = client.post("/stations/1/edit", data={"tin": "222"})

        assert response.headers["Location"].endswith("/stations")
        with client.session_transaction() as sess:
            assert ("error", "Failed to update station") in sess["_flashes"]

    def test_inline_edit_requires_permission(self, client, backend, login_as) -> None:
        login_as(make_user(role="manager", permissions=["stations:read_stations"]))
        assert client.post("/stations/1/edit", data={"name": "X"}).status_code == 403
        assert backend.calls == []


class TestStringIds:
    def test_manager_conflict_with_string_ids(self) -> None:
        stations = [{"id": "1", "name": "North Station", "managerId": "20"}]
        assert find_manager_conflict(stations, 20)["name"] == "North Station"
        assert find_manager_conflict(stations, 20, editing_id=1) is None
        assert [m["id"] for m in available_managers(MANAGERS, stations)] == [21]
