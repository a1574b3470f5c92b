"""
Tests for Tabledash API endpoints: health, CORS and the browse surface.
"""

from fastapi.testclient import TestClient

from tabledash.deps import get_public_db
from tabledash.main import app
from tabledash.modules.dashboard.cache import QueryResultCache, get_query_cache

from conftest import FakeAPIError


class TestHealth:
    """Health check tests."""

    def test_health_check(self, client):
        """Test health endpoint returns healthy status."""
        response = client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert "version" in data
        assert data["supabase_configured"] is True
        assert data["vod_configured"] is True


class TestRoot:
    """Root endpoint tests."""

    def test_root_endpoint(self, client):
        response = client.get("/")
        assert response.status_code == 200

        data = response.json()
        assert "message" in data
        assert "docs" in data


class TestOpenAPI:
    """OpenAPI schema tests."""

    def test_openapi_available(self, client):
        response = client.get("/openapi.json")
        assert response.status_code == 200

        data = response.json()
        assert data["openapi"].startswith("3.")
        assert data["info"]["title"] == "Tabledash API"


class TestCors:
    """Permissive CORS on every response."""

    def test_headers_on_success(self, client):
        response = client.get("/health")
        assert response.headers["access-control-allow-origin"] == "*"
        assert "DELETE" in response.headers["access-control-allow-methods"]
        assert "x-supabase-secret-key" in response.headers["access-control-allow-headers"]

    def test_headers_on_error(self, client):
        response = client.get("/api/data/navigation")
        assert response.status_code == 401
        assert response.headers["access-control-allow-origin"] == "*"

    def test_options_preflight(self, client, fake_db):
        for path in ("/api/data/navigation", "/api/auth/verify", "/api/vod/detail", "/anything"):
            response = client.options(path)
            assert response.status_code == 200
            assert response.content == b""
            assert response.headers["access-control-allow-origin"] == "*"
        assert fake_db.calls == []


class TestSite:
    def test_site_copy(self, client):
        response = client.get("/api/site")
        assert response.status_code == 200
        assert response.json()["system_name"] == "Test Dashboard"


class TestTables:
    """Table listing."""

    def test_tables_in_declaration_order(self, client, fake_db):
        fake_db.tables["navigation_category"] = [{"category": "tools"}, {"category": "news"}]
        response = client.get("/api/tables")
        assert response.status_code == 200

        data = response.json()
        assert data["total"] == 3
        items = {item["name"]: item for item in data["items"]}
        assert [item["name"] for item in data["items"]] == ["navigation", "films", "notes"]

        assert items["navigation"]["display_name"] == "Navigation"
        assert items["navigation"]["page_size"] == 32
        assert items["navigation"]["category_enabled"] is True
        assert items["navigation"]["categories"] == ["tools", "news"]
        assert items["navigation"]["default_view"] == "table"

        assert items["films"]["category_enabled"] is False
        assert items["films"]["categories"] == []
        assert items["films"]["default_view"] == "card"
        assert items["notes"]["display_name"] == "notes"
        assert items["notes"]["page_size"] == 8

    def test_category_view_failure_is_not_fatal(self, client, fake_db):
        fake_db.errors["navigation_category"] = FakeAPIError("missing view")
        response = client.get("/api/tables")
        assert response.status_code == 200
        assert response.json()["items"][0]["categories"] == []


class TestBrowse:
    """Browse pages."""

    def test_navigation_pages(self, client, fake_db):
        fake_db.tables["navigation"] = [{"id": i, "name": f"site {i}"} for i in range(65)]

        last = client.get("/api/tables/navigation/rows?page=3").json()
        assert last["pagination"] == {
            "page": 3,
            "page_size": 32,
            "total_count": 65,
            "total_pages": 3,
            "range_start": 64,
            "range_end": 95,
        }
        assert [row["id"] for row in last["rows"]] == [64]

    def test_filters_applied_in_order(self, client, fake_db):
        client.get("/api/tables/navigation/rows", params={"category": "tools", "search": " git "})
        assert fake_db.calls_for("navigation") == [
            ("select", "*", "exact"),
            ("eq", "category", "tools"),
            ("or", "name.ilike.%git%,url.ilike.%git%"),
            ("range", 0, 31),
        ]

    def test_echoes_effective_filters(self, client):
        data = client.get("/api/tables/films/rows", params={"category": "drama", "search": "  "}).json()
        assert data["category"] is None
        assert data["search"] is None
        assert data["view"] == "card"

    def test_hidden_columns_and_rendering(self, client, fake_db):
        fake_db.tables["navigation"] = [
            {"id": 1, "name": "Docs", "url": "https://docs.example", "category": None, "secret": "s3cret"}
        ]
        data = client.get("/api/tables/navigation/rows").json()

        assert [c["name"] for c in data["columns"]] == ["name", "url", "category"]
        assert data["columns"][1]["thumbnail"] is True

        cells = {cell["column"]: cell for cell in data["rendered"][0]["cells"]}
        assert "secret" not in cells
        assert cells["url"]["href"] == "https://docs.example"
        assert cells["url"]["truncated"] is True
        assert cells["url"]["tooltip"] == "https://docs.example"
        assert cells["name"]["href"] is None
        assert cells["category"]["text"] == ""

    def test_card_face_uses_default_image(self, client, fake_db):
        fake_db.tables["films"] = [
            {"id": 1, "title": "A", "poster": "https://img.example/a.png", "keyword": "a"},
            {"id": 2, "title": "B", "poster": "", "keyword": ""},
        ]
        data = client.get("/api/tables/films/rows").json()
        cards = [row["card"] for row in data["rendered"]]
        assert cards[0] == {"image_url": "https://img.example/a.png", "keyword": "a"}
        assert cards[1] == {"image_url": "https://img.example/default.png", "keyword": None}

    def test_unconfigured_table(self, client):
        response = client.get("/api/tables/secrets/rows")
        assert response.status_code == 404

    def test_unavailable_view(self, client):
        response = client.get("/api/tables/films/rows", params={"view": "table"})
        assert response.status_code == 400

    def test_page_zero_rejected(self, client):
        response = client.get("/api/tables/navigation/rows", params={"page": 0})
        assert response.status_code == 400

    def test_database_error(self, client, fake_db):
        fake_db.errors["notes"] = FakeAPIError("permission denied", code="42501")
        response = client.get("/api/tables/notes/rows")
        assert response.status_code == 500
        assert response.json()["error"]["details"]["code"] == "42501"


class TestForm:
    def test_form_fields_in_order(self, client):
        data = client.get("/api/tables/navigation/form").json()
        assert [f["name"] for f in data["fields"]] == ["name", "url", "category", "secret"]
        assert data["fields"][1] == {"name": "url", "label": "Link", "value": ""}

    def test_form_unknown_table(self, client):
        assert client.get("/api/tables/unknown/form").status_code == 404

    def test_form_prefilled_from_row(self, client, fake_db):
        fake_db.tables["navigation"] = [{"id": 7, "name": "Docs", "url": "https://docs.example", "category": None}]
        data = client.get("/api/tables/navigation/form", params={"id": "7"}).json()
        values = {f["name"]: f["value"] for f in data["fields"]}
        assert values == {"name": "Docs", "url": "https://docs.example", "category": "", "secret": ""}
        assert fake_db.calls_for("navigation") == [("select", "*", None), ("eq", "id", "7"), ("limit", 1)]

    def test_form_unknown_row(self, client, fake_db):
        fake_db.tables["navigation"] = [{"id": 7, "name": "Docs"}]
        response = client.get("/api/tables/navigation/form", params={"id": "99"})
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"


class TestArticle:
    def test_article_by_slug(self, client, fake_db):
        fake_db.tables["navigation"] = [
            {"id": 1, "slug": "intro", "name": "Intro"},
            {"id": 2, "slug": "guide", "name": "Guide"},
        ]
        response = client.get("/api/articles/guide")
        assert response.status_code == 200
        assert response.json() == {"slug": "guide", "article": {"id": 2, "slug": "guide", "name": "Guide"}}
        assert fake_db.calls_for("navigation") == [("select", "*", None), ("eq", "slug", "guide"), ("limit", 1)]

    def test_html_suffix_ignored(self, client, fake_db):
        fake_db.tables["navigation"] = [{"id": 2, "slug": "guide"}]
        data = client.get("/api/articles/guide.html").json()
        assert data["slug"] == "guide"
        assert data["article"]["id"] == 2

    def test_missing_article(self, client, fake_db):
        fake_db.tables["navigation"] = [{"id": 1, "slug": "intro"}]
        response = client.get("/api/articles/nowhere.html")
        assert response.status_code == 404
        assert response.json()["error"]["details"]["resource_id"] == "nowhere"

    def test_database_error(self, client, fake_db):
        fake_db.errors["navigation"] = FakeAPIError("column slug does not exist", code="42703")
        response = client.get("/api/articles/intro")
        assert response.status_code == 500
        assert response.json()["error"]["code"] == "DATABASE_ERROR"


class TestBrowseCacheBound:
    def test_distinct_searches_do_not_accumulate(self, dashboard_env, fake_db):
        now = [0.0]
        cache = QueryResultCache(ttl_seconds=60, clock=lambda: now[0])
        app.dependency_overrides[get_public_db] = lambda: fake_db
        app.dependency_overrides[get_query_cache] = lambda: cache
        try:
            with TestClient(app) as client:
                for i in range(50):
                    client.get("/api/tables/navigation/rows", params={"search": f"term{i}"})
                assert cache.stats()["size"] == 50

                now[0] += 10_000
                client.get("/api/tables/navigation/rows", params={"search": "last"})
                assert cache.stats()["size"] == 1
        finally:
            app.dependency_overrides.clear()
