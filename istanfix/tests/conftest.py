"""
Shared fixtures: an isolated app per test (temp SQLite + temp upload dir)
and helpers for registering users and filing reports.
"""

import itertools

import pytest
from fastapi.testclient import TestClient

from istanfix.api import create_app
from istanfix.config import Settings
from istanfix.db.session import Database
from istanfix.seed import seed_reference_data

GOV_CODE = "GOV-TEST-CODE"

_emails = itertools.count(1)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        database_url=f"sqlite:///{tmp_path / 'istanfix_test.db'}",
        upload_dir=str(tmp_path / "uploads"),
        gov_verification_code=GOV_CODE,
        jwt_secret_key="test-secret-key",
        bcrypt_rounds=4,
        seed_on_startup=True,
        rate_limit_enabled=False,
        log_level="WARNING",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    """Test client; the context manager runs startup (schema + seed)"""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def database(tmp_path):
    """Bare storage client with the schema but no reference data"""
    db = Database(f"sqlite:///{tmp_path / 'models.db'}").open()
    db.create_schema()
    yield db
    db.close()


@pytest.fixture
def seeded_database(database):
    seed_reference_data(database.session)
    return database


@pytest.fixture
def register(client):
    """Sign up a user; returns id, role and auth headers"""

    def _register(name="Ayşe Yılmaz", role="user", password="secret123", email=None):
        payload = {
            "name": name,
            "email": email or f"user{next(_emails)}@example.com",
            "password": password,
            "role": role,
        }
        if role == "government":
            payload["gov_verification_code"] = GOV_CODE
        resp = client.post("/api/auth/signup", json=payload)
        assert resp.status_code == 201, resp.text
        body = resp.json()
        return {
            "id": body["userId"],
            "role": body["role"],
            "email": body["email"],
            "headers": {"Authorization": f"Bearer {body['access_token']}"},
        }

    return _register


@pytest.fixture
def citizen(register):
    return register(name="Ayşe Yılmaz")


@pytest.fixture
def other_citizen(register):
    return register(name="Mehmet Demir")


@pytest.fixture
def official(register):
    return register(name="Belediye Memuru", role="government")


@pytest.fixture
def ref(client):
    """Ids of seeded reference rows used across tests"""
    categories = client.get("/api/categories").json()["data"]
    districts = {d["name"]: d["id"] for d in client.get("/api/districts").json()["data"]}
    neighborhoods = {
        (n["district_name"], n["name"]): n["id"]
        for n in client.get("/api/neighborhoods").json()["data"]
    }
    return {
        "category_id": categories[0]["id"],
        "other_category_id": categories[1]["id"],
        "kadikoy": districts["Kadıköy"],
        "besiktas": districts["Beşiktaş"],
        "moda": neighborhoods[("Kadıköy", "Moda")],
        "bebek": neighborhoods[("Beşiktaş", "Bebek")],
    }


@pytest.fixture
def file_report(client, ref):
    """Create a report as `user`; returns the response"""

    def _file_report(user, files=None, **fields):
        data = {
            "category_id": str(ref["category_id"]),
            "district_id": str(ref["kadikoy"]),
            "address": "Moda Caddesi No: 12",
            "description": "Large pothole in front of the bakery",
        }
        data.update({k: v for k, v in fields.items() if v is not None})
        return client.post("/api/reports", data=data, files=files, headers=user["headers"])

    return _file_report
