import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from models import Page
from services.cache_service import InMemoryCacheService


@pytest.mark.integration
class TestPublicPageEndpoints:

    def test_render_published_page(self, client: TestClient, sample_page: Page):
        """Test a published page renders without authentication."""
        response = client.get("/api/v1/public/pages/ana-souza/")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        html = response.text
        assert "<title>Ana Souza</title>" in html
        assert "Sobre" in html
        assert "Ola" in html
        assert "page__branding" in html
        assert "data-block-id" not in html

    def test_render_without_branding(self, client: TestClient, sample_page: Page, db_session: Session):
        sample_page.remove_branding = True
        db_session.commit()

        response = client.get("/api/v1/public/pages/ana-souza/")

        assert "page__branding" not in response.text

    def test_unpublished_page_is_not_found(
        self, client: TestClient, sample_page: Page, db_session: Session, cache: InMemoryCacheService
    ):
        sample_page.is_published = False
        db_session.commit()

        response = client.get("/api/v1/public/pages/ana-souza/")

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "E3001"
        assert cache.keys() == []

    def test_unknown_block_renders_placeholder(self, client: TestClient, sample_page: Page, db_session: Session):
        """Test one unknown block never blanks the page."""
        sample_page.content_json = {"blocks": [
            {"id": "t1", "type": "text", "props": {"content": "Before"}},
            {"id": "x1", "type": "carousel", "props": {}},
            {"id": "t2", "type": "text", "props": {"content": "After"}},
        ]}
        db_session.commit()

        response = client.get("/api/v1/public/pages/ana-souza/")

        assert response.status_code == 200
        assert "Before" in response.text
        assert "After" in response.text
        assert response.text.count("block-placeholder") == 1

    def test_render_is_cached(self, client: TestClient, sample_page: Page, cache: InMemoryCacheService):
        client.get("/api/v1/public/pages/ana-souza/")

        assert "page:ana-souza:html" in cache.keys()

    def test_saved_content_is_served_after_cached_read(
        self, client: TestClient, sample_page: Page, author_headers: dict, cache: InMemoryCacheService
    ):
        """Test a content write invalidates the cached render so the next read is fresh."""
        first = client.get("/api/v1/public/pages/ana-souza/")
        assert "Ola" in first.text

        document = {"blocks": [{"id": "t1", "type": "text", "props": {"content": "Hello again"}}]}
        saved = client.put(f"/api/v1/pages/{sample_page.id}/content/", json=document, headers=author_headers)
        assert saved.status_code == 200
        assert "page:ana-souza:html" not in cache.keys()

        second = client.get("/api/v1/public/pages/ana-souza/")
        assert "Hello again" in second.text
        assert "Ola" not in second.text

    def test_renamed_page_drops_old_slug(
        self, client: TestClient, sample_page: Page, author_headers: dict
    ):
        client.get("/api/v1/public/pages/ana-souza/")

        client.put(f"/api/v1/pages/{sample_page.id}/", json={"slug": "ana"}, headers=author_headers)

        assert client.get("/api/v1/public/pages/ana-souza/").status_code == 404
        assert client.get("/api/v1/public/pages/ana/").status_code == 200

    def test_public_document(self, client: TestClient, sample_page: Page, columns_document: dict):
        response = client.get("/api/v1/public/pages/ana-souza/document/")

        assert response.status_code == 200
        assert response.json() == columns_document

    def test_public_document_not_found(self, client: TestClient):
        response = client.get("/api/v1/public/pages/nobody/document/")

        assert response.status_code == 404

    def test_unpublishing_invalidates_document(
        self, client: TestClient, sample_page: Page, author_headers: dict
    ):
        client.get("/api/v1/public/pages/ana-souza/document/")

        client.put(f"/api/v1/pages/{sample_page.id}/", json={"is_published": False}, headers=author_headers)

        assert client.get("/api/v1/public/pages/ana-souza/document/").status_code == 404
