"""Unit tests for companion API endpoints."""
import pytest

from tutor.core.config import settings


@pytest.fixture
def create_companion(test_client, user_headers, companion_data):
    """Create a companion through the API and return its JSON."""
    def _create(headers=None, **overrides):
        data = {**companion_data, **overrides}
        response = test_client.post(
            "/api/companions", json=data, headers=headers or user_headers
        )
        assert response.status_code == 201, response.text
        return response.json()
    return _create


class TestCreateCompanion:
    """Test POST /api/companions."""

    def test_create_companion_success(self, test_client, user_headers, companion_data):
        response = test_client.post("/api/companions", json=companion_data, headers=user_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == companion_data["name"]
        assert data["subject"] == "science"
        assert data["author"] == "user_123"
        assert data["duration"] == 20
        assert data["color"] == "#E5D0FF"
        assert data["id"]

    def test_create_requires_user(self, test_client, companion_data):
        response = test_client.post("/api/companions", json=companion_data)

        assert response.status_code == 401
        assert response.json()["detail"] == "Authentication required"

    @pytest.mark.parametrize(
        "field,value",
        [
            ("name", ""),
            ("topic", "   "),
            ("subject", "astrology"),
            ("voice", "robot"),
            ("style", "sarcastic"),
            ("duration", 0),
        ],
    )
    def test_create_invalid_data(self, test_client, user_headers, companion_data, field, value):
        response = test_client.post(
            "/api/companions", json={**companion_data, field: value}, headers=user_headers
        )
        assert response.status_code == 422

    def test_create_missing_fields(self, test_client, user_headers):
        response = test_client.post(
            "/api/companions", json={"name": "Only a name"}, headers=user_headers
        )
        assert response.status_code == 422

    def test_create_normalizes_choices(self, test_client, user_headers, companion_data):
        response = test_client.post(
            "/api/companions",
            json={**companion_data, "subject": "Maths", "voice": "MALE", "style": "Formal"},
            headers=user_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert (data["subject"], data["voice"], data["style"]) == ("maths", "male", "formal")

    def test_create_past_limit_forbidden(self, create_companion, test_client, user_headers,
                                         companion_data, monkeypatch):
        monkeypatch.setattr(settings, "companion_limit", 1)
        create_companion()

        response = test_client.post("/api/companions", json=companion_data, headers=user_headers)

        assert response.status_code == 403
        assert response.json()["detail"] == "Companion limit reached"


class TestReadCompanions:
    """Test companion listing and lookup."""

    def test_get_companion(self, test_client, create_companion):
        created = create_companion()

        response = test_client.get(f"/api/companions/{created['id']}")

        assert response.status_code == 200
        assert response.json() == created

    def test_get_companion_not_found(self, test_client):
        response = test_client.get("/api/companions/does-not-exist")

        assert response.status_code == 404
        assert response.json()["detail"] == "Companion not found"

    def test_list_companions_with_filters(self, test_client, create_companion):
        create_companion(subject="maths", topic="Derivatives")
        create_companion(subject="history", topic="The Roman Empire")
        create_companion(subject="maths", name="Integral Ida", topic="Areas")

        all_companions = test_client.get("/api/companions").json()
        maths = test_client.get("/api/companions", params={"subject": "maths"}).json()
        by_name = test_client.get("/api/companions", params={"topic": "ida"}).json()

        assert len(all_companions) == 3
        assert len(maths) == 2
        assert [c["name"] for c in by_name] == ["Integral Ida"]

    def test_list_companions_pagination(self, test_client, create_companion):
        for index in range(3):
            create_companion(name=f"Companion {index}")

        page_two = test_client.get("/api/companions", params={"limit": 2, "page": 2})

        assert page_two.status_code == 200
        assert len(page_two.json()) == 1

    def test_list_companions_invalid_page(self, test_client):
        response = test_client.get("/api/companions", params={"page": 0})
        assert response.status_code == 422

    def test_my_companions(self, test_client, create_companion, user_headers):
        create_companion()
        create_companion(headers={"X-User-Id": "someone_else"})

        response = test_client.get("/api/users/me/companions", headers=user_headers)

        assert response.status_code == 200
        assert [c["author"] for c in response.json()] == ["user_123"]


class TestPermissions:
    """Test GET /api/companions/permissions."""

    def test_unlimited_by_default(self, test_client, user_headers, monkeypatch):
        monkeypatch.setattr(settings, "companion_limit", None)

        response = test_client.get("/api/companions/permissions", headers=user_headers)

        assert response.status_code == 200
        assert response.json() == {"can_create": True, "limit": None, "count": 0}

    def test_limit_reached(self, test_client, create_companion, user_headers, monkeypatch):
        monkeypatch.setattr(settings, "companion_limit", 2)
        create_companion()
        create_companion()

        response = test_client.get("/api/companions/permissions", headers=user_headers)

        assert response.json() == {"can_create": False, "limit": 2, "count": 2}

    def test_requires_user(self, test_client):
        response = test_client.get("/api/companions/permissions")
        assert response.status_code == 401
