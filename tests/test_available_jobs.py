from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import OperationalError

from mechanic_backend.core.errors import InternalError
from mechanic_backend.models import Notification, ServiceRequest
from mechanic_backend.services.queries import available_jobs_query, run_query
from tests.conftest import auth_headers, days_from_now, fresh


@pytest.fixture
def driver(make_user):
    return make_user("driver")


def test_only_unclaimed_accepted_jobs(db_session, make_request, make_user):
    other_driver = make_user("driver")
    open_job = make_request(status="accepted", pickup_date=days_from_now(2))
    make_request(status="accepted", pickup_driver_id=other_driver.id)
    for status in ("pending", "assigned", "in_progress", "completed", "cancelled", "pending_payment"):
        make_request(status=status)

    jobs = run_query(db_session, available_jobs_query(), "failed")

    assert [j.id for j in jobs] == [open_job.id]
    assert all(j.status == "accepted" and j.pickup_driver_id is None for j in jobs)


def test_ordered_by_pickup_date(db_session, make_request):
    later = make_request(status="accepted", pickup_date=days_from_now(5))
    sooner = make_request(status="accepted", pickup_date=days_from_now(1))
    middle = make_request(status="accepted", pickup_date=days_from_now(3))

    jobs = run_query(db_session, available_jobs_query(), "failed")

    assert [j.id for j in jobs] == [sooner.id, middle.id, later.id]


def test_shop_filter(db_session, make_request, make_shop):
    shop_a = make_shop("A")
    shop_b = make_shop("B")
    job_a = make_request(status="accepted", shop_id=shop_a.id)
    make_request(status="accepted", shop_id=shop_b.id)

    jobs = run_query(db_session, available_jobs_query(shop_id=shop_a.id), "failed")

    assert [j.id for j in jobs] == [job_a.id]


def test_search_matches_any_field_case_insensitive(db_session, make_request):
    by_type = make_request(status="accepted", service_type="Brake Repair")
    by_description = make_request(
        status="accepted", service_type="Inspection", description="squeaky BRAKES"
    )
    by_address = make_request(
        status="accepted", service_type="Tyres", pickup_address="1 Brakeman Road"
    )
    make_request(status="accepted", service_type="Oil change", description="", pickup_address="x")

    jobs = run_query(db_session, available_jobs_query(search="BRAKE"), "failed")

    assert {j.id for j in jobs} == {by_type.id, by_description.id, by_address.id}


def test_search_wildcards_are_literal(db_session, make_request):
    make_request(status="accepted", service_type="Oil change")

    assert run_query(db_session, available_jobs_query(search="%"), "failed") == []
    assert run_query(db_session, available_jobs_query(search="_"), "failed") == []


def test_store_error_becomes_internal_error():
    class BrokenSession:
        def scalars(self, q):
            raise OperationalError("SELECT", {}, Exception("connection refused"))

    with pytest.raises(InternalError) as exc:
        run_query(BrokenSession(), available_jobs_query(), "Failed to fetch available jobs")

    assert exc.value.message == "Failed to fetch available jobs"
    assert "connection refused" in exc.value.details


def test_endpoint_requires_driver(client, make_user):
    shop_user = make_user("shop")

    resp = client.get("/available-jobs", headers=auth_headers(shop_user))

    assert resp.status_code == 403
    assert resp.json()["error"] == "Only drivers can access available jobs"


def test_endpoint_returns_jobs_with_shop(client, driver, make_request, make_shop):
    shop = make_shop("Eastside Motors")
    job = make_request(
        status="accepted",
        shop_id=shop.id,
        pickup_date=datetime(2026, 11, 2, 9, 30, tzinfo=timezone.utc),
    )

    resp = client.get(
        "/available-jobs",
        params={"shop_id": shop.id, "search": "oil", "unknown": "ignored"},
        headers=auth_headers(driver),
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert [j["id"] for j in body["data"]] == [job.id]
    assert body["data"][0]["shop"]["name"] == "Eastside Motors"
    assert body["data"][0]["pickup_driver_id"] is None


def test_driver_accept_claims_job(client, db_session, driver, make_request):
    job = make_request(status="accepted", service_type="Brake repair")

    resp = client.post(
        "/driver-accept", json={"serviceRequestId": job.id}, headers=auth_headers(driver)
    )

    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "driver_assigned_pickup"
    sr = fresh(db_session, ServiceRequest, job.id)
    assert sr.pickup_driver_id == driver.id
    note = db_session.query(Notification).filter_by(user_id=job.customer_id).one()
    assert "Brake repair" in note.message
    assert note.is_read is False


def test_driver_accept_twice_is_rejected(client, driver, make_user, make_request):
    job = make_request(status="accepted")
    other = make_user("driver")

    first = client.post(
        "/driver-accept", json={"serviceRequestId": job.id}, headers=auth_headers(driver)
    )
    second = client.post(
        "/driver-accept", json={"serviceRequestId": job.id}, headers=auth_headers(other)
    )

    assert first.status_code == 200
    assert second.status_code == 400


def test_driver_accept_validation(client, driver, make_request):
    pending = make_request(status="pending")

    assert client.post("/driver-accept", json={}, headers=auth_headers(driver)).status_code == 400
    assert (
        client.post(
            "/driver-accept", json={"serviceRequestId": "missing"}, headers=auth_headers(driver)
        ).status_code
        == 404
    )
    resp = client.post(
        "/driver-accept", json={"serviceRequestId": pending.id}, headers=auth_headers(driver)
    )
    assert resp.status_code == 400
    assert "accepted" in resp.json()["error"]


def test_driver_accept_requires_driver(client, make_user, make_request):
    customer = make_user("customer")
    job = make_request(status="accepted")

    resp = client.post(
        "/driver-accept", json={"serviceRequestId": job.id}, headers=auth_headers(customer)
    )

    assert resp.status_code == 403
    assert resp.json()["error"] == "Only drivers can accept jobs"
