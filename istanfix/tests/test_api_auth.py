"""
Auth & Reference Data API Tests
"""

from unittest.mock import patch

from istanfix.auth import AuthService
from istanfix.db.models import User


def _users_with_email(app, email):
    with app.state.database.session_scope() as db:
        return db.query(User).filter(User.email == email).count()


class TestSignup:

    def test_signup_returns_token(self, client):
        resp = client.post("/api/auth/signup", json={
            "name": "Ayşe", "email": "Ayse@Example.com", "password": "secret123",
        })
        assert resp.status_code == 201
        body = resp.json()
        assert body["message"] == "User registered successfully"
        assert body["email"] == "ayse@example.com"
        assert body["role"] == "user"
        assert body["access_token"]

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
        assert me.status_code == 200
        assert me.json()["user"]["id"] == body["userId"]

    def test_missing_fields(self, client):
        resp = client.post("/api/auth/signup", json={"name": "Ayşe", "email": "a@example.com"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Name, email, and password are required."}

    def test_invalid_email(self, client):
        resp = client.post("/api/auth/signup", json={"name": "A", "email": "nope", "password": "x"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid email format."

    def test_invalid_role(self, client):
        resp = client.post("/api/auth/signup", json={
            "name": "A", "email": "a@example.com", "password": "x", "role": "mayor",
        })
        assert resp.status_code == 400
        assert resp.json()["error"].startswith("Invalid role")

    def test_duplicate_email(self, app, client, register):
        register(email="dup@example.com")
        resp = client.post("/api/auth/signup", json={
            "name": "Other", "email": "DUP@example.com", "password": "x",
        })
        assert resp.status_code == 400
        assert resp.json()["error"] == "Email already registered."
        assert _users_with_email(app, "dup@example.com") == 1

    def test_duplicate_email_caught_at_insert(self, app, client, register):
        register(email="race@example.com")
        with patch.object(AuthService, "get_user_by_email", return_value=None):
            resp = client.post("/api/auth/signup", json={
                "name": "Other", "email": "race@example.com", "password": "x",
            })
        assert resp.status_code == 400
        assert resp.json() == {"error": "Email already registered."}
        assert _users_with_email(app, "race@example.com") == 1

    def test_government_requires_code(self, client):
        resp = client.post("/api/auth/signup", json={
            "name": "G", "email": "g@example.com", "password": "x", "role": "government",
            "gov_verification_code": "wrong",
        })
        assert resp.status_code == 403
        assert resp.json()["error"] == "Invalid government verification code."

    def test_government_with_code(self, client, settings):
        resp = client.post("/api/auth/signup", json={
            "name": "G", "email": "g@example.com", "password": "x", "role": "government",
            "gov_verification_code": settings.gov_verification_code,
        })
        assert resp.status_code == 201
        assert resp.json()["role"] == "government"

    def test_overlong_password(self, client):
        resp = client.post("/api/auth/signup", json={"name": "A", "email": "a@example.com", "password": "p" * 80})
        assert resp.status_code == 400

    def test_malformed_body_is_400(self, client):
        resp = client.post("/api/auth/signup", content=b"{not json", headers={"Content-Type": "application/json"})
        assert resp.status_code == 400
        assert "error" in resp.json()


class TestLogin:

    def test_login_success(self, client, register):
        user = register(email="login@example.com", password="hunter22")
        resp = client.post("/api/auth/login", json={"email": "login@example.com", "password": "hunter22"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["message"] == "Login successful"
        assert body["user"] == {"id": user["id"], "name": "Ayşe Yılmaz", "email": "login@example.com", "role": "user"}
        assert "hashed_password" not in body["user"]
        assert body["access_token"]

    def test_wrong_password(self, client, register):
        register(email="login@example.com", password="hunter22")
        resp = client.post("/api/auth/login", json={"email": "login@example.com", "password": "wrong"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid email or password."}

    def test_unknown_email_same_message(self, client):
        resp = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "x"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid email or password."}

    def test_missing_fields(self, client):
        resp = client.post("/api/auth/login", json={"email": "a@example.com"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Email and password are required."


class TestMe:

    def test_requires_token(self, client):
        resp = client.get("/api/auth/me")
        assert resp.status_code == 401
        assert resp.json() == {"error": "Authentication required."}
        assert resp.headers["WWW-Authenticate"] == "Bearer"

    def test_bad_token(self, client):
        resp = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
        assert resp.status_code == 401


class TestReferenceData:

    def test_categories(self, client):
        data = client.get("/api/categories").json()["data"]
        assert len(data) == 7
        assert {"id", "name", "icon", "description"} <= set(data[0])

    def test_districts_sorted(self, client):
        data = client.get("/api/districts").json()["data"]
        assert len(data) == 39
        names = [d["name"] for d in data]
        assert names == sorted(names)

    def test_neighborhoods_filtered(self, client, ref):
        data = client.get(f"/api/neighborhoods?district_id={ref['kadikoy']}").json()["data"]
        assert data
        assert all(n["district_id"] == ref["kadikoy"] for n in data)
        assert all(n["district_name"] == "Kadıköy" for n in data)

    def test_district_neighborhoods(self, client, ref):
        resp = client.get(f"/api/districts/{ref['besiktas']}/neighborhoods")
        assert resp.status_code == 200
        assert "Bebek" in [n["name"] for n in resp.json()["data"]]

    def test_unknown_district(self, client):
        resp = client.get("/api/districts/9999/neighborhoods")
        assert resp.status_code == 404
        assert resp.json() == {"error": "District not found."}

    def test_bad_district_filter(self, client):
        resp = client.get("/api/neighborhoods?district_id=abc")
        assert resp.status_code == 400


class TestSystem:

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["database"] == "ok"

    def test_pages_served(self, client):
        for path in ("/", "/index.html", "/report.html", "/login.html", "/signup.html"):
            resp = client.get(path)
            assert resp.status_code == 200, path
            assert resp.headers["content-type"].startswith("text/html")

    def test_unknown_page(self, client):
        resp = client.get("/admin.html")
        assert resp.status_code == 404
        assert "error" in resp.json()

    def test_static_assets(self, client):
        assert client.get("/static/script.js").status_code == 200
        assert client.get("/static/style.css").status_code == 200

    def test_seeding_on_restart_is_idempotent(self, app):
        from fastapi.testclient import TestClient

        with TestClient(app) as c:
            c.get("/health")
        with TestClient(app) as c:
            assert len(c.get("/api/categories").json()["data"]) == 7
