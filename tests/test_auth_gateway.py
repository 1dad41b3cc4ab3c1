from mechanic_backend.core.config import settings
from mechanic_backend.core.security import create_access_token
from mechanic_backend.db.session import get_db
from mechanic_backend.main import app
from tests.conftest import auth_headers


class _StoreMustNotBeTouched:
    def __getattr__(self, name):
        raise AssertionError(f"store accessed: {name}")


def test_missing_header_is_rejected_before_store(client):
    app.dependency_overrides[get_db] = lambda: _StoreMustNotBeTouched()

    resp = client.get("/available-jobs")

    assert resp.status_code == 401
    assert resp.json() == {"success": False, "error": "Unauthorized"}


def test_malformed_header_is_rejected_before_store(client):
    app.dependency_overrides[get_db] = lambda: _StoreMustNotBeTouched()

    resp = client.get("/available-jobs", headers={"Authorization": "Basic abc"})
    assert resp.status_code == 401

    resp = client.get("/available-jobs", headers={"Authorization": "Bearer "})
    assert resp.status_code == 401


def test_invalid_token(client):
    resp = client.get("/available-jobs", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


def test_token_signed_with_other_secret(client, make_user, monkeypatch):
    driver = make_user("driver")
    monkeypatch.setattr(settings, "jwt_secret", "someone-elses-secret")
    token = create_access_token(sub=driver.id, role="driver")
    monkeypatch.undo()

    resp = client.get("/available-jobs", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


def test_expired_token(client, make_user):
    driver = make_user("driver")
    token = create_access_token(sub=driver.id, role="driver", expires_minutes=-5)

    resp = client.get("/available-jobs", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


def test_unknown_user(client):
    token = create_access_token(sub="00000000-0000-0000-0000-000000000000", role="driver")

    resp = client.get("/available-jobs", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 404
    assert resp.json()["error"] == "User not found"


def test_inactive_user(client, make_user):
    driver = make_user("driver", is_active=False)

    resp = client.get("/available-jobs", headers=auth_headers(driver))
    assert resp.status_code == 401


def test_session_cookie_is_accepted(client, make_user):
    driver = make_user("driver")
    token = create_access_token(sub=driver.id, role="driver")
    client.cookies.set(settings.session_cookie_name, token)

    resp = client.get("/available-jobs")

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "data": []}


def test_role_comes_from_store_not_token(client, make_user):
    customer = make_user("customer")
    # the token claims driver, the users row says customer
    token = create_access_token(sub=customer.id, role="driver")

    resp = client.get("/available-jobs", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 403
    assert resp.json()["error"] == "Only drivers can access available jobs"
