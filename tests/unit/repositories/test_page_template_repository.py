import pytest
from unittest.mock import Mock, patch
from uuid import uuid4
from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError

from models import PageTemplate, PageTemplateCategory
from repositories.page_template_repository import PageTemplateRepository
from schemas.content import ContentDocument
from schemas.page_template import PageTemplateCreate, PageTemplateUpdate


@pytest.mark.unit
class TestPageTemplateRepository:

    def setup_method(self):
        """Set up test data for each test."""
        self.mock_db = Mock()
        self.repository = PageTemplateRepository(self.mock_db)

        self.template_id = uuid4()
        self.mock_template = Mock()
        self.mock_template.id = self.template_id
        self.mock_template.slug = "portfolio"
        self.mock_template.name = "Portfolio"
        self.mock_template.is_active = True

        self.content = ContentDocument.model_validate({"blocks": [{"id": "h", "type": "hero", "props": {}}]})

    def test_get_all_active_only(self):
        templates = [self.mock_template]
        query = self.mock_db.query.return_value
        query.filter.return_value.order_by.return_value.all.return_value = templates

        result = self.repository.get_all()

        assert result == templates
        self.mock_db.query.assert_called_once_with(PageTemplate)
        query.filter.assert_called_once()

    def test_get_all_including_inactive(self):
        templates = [self.mock_template]
        query = self.mock_db.query.return_value
        query.order_by.return_value.all.return_value = templates

        result = self.repository.get_all(include_inactive=True)

        assert result == templates
        query.filter.assert_not_called()

    def test_get_by_id_not_found(self):
        self.mock_db.query.return_value.filter.return_value.first.return_value = None

        with pytest.raises(HTTPException) as exc_info:
            self.repository.get_by_id(self.template_id)

        assert exc_info.value.status_code == 404
        assert exc_info.value.detail["code"] == "E3007"

    def test_get_active_by_slug_found(self):
        self.mock_db.query.return_value.filter.return_value.first.return_value = self.mock_template

        assert self.repository.get_active_by_slug("portfolio") == self.mock_template

    def test_get_active_by_slug_not_found(self):
        self.mock_db.query.return_value.filter.return_value.first.return_value = None

        with pytest.raises(HTTPException) as exc_info:
            self.repository.get_active_by_slug("retired")

        assert exc_info.value.status_code == 404

    def test_create_success(self):
        data = PageTemplateCreate(name="Portfolio", slug="portfolio", category=PageTemplateCategory.CV)
        self.mock_db.query.return_value.filter.return_value.first.return_value = None

        with patch("repositories.page_template_repository.PageTemplate") as mock_template_class:
            mock_template_class.return_value = self.mock_template

            result = self.repository.create(data, self.content)

        assert result == self.mock_template
        assert mock_template_class.call_args.kwargs["content_json"] == self.content.to_json()
        assert mock_template_class.call_args.kwargs["category"] == PageTemplateCategory.CV
        self.mock_db.add.assert_called_once_with(self.mock_template)
        self.mock_db.commit.assert_called_once()

    def test_create_duplicate_slug(self):
        data = PageTemplateCreate(name="Portfolio", slug="portfolio")
        self.mock_db.query.return_value.filter.return_value.first.return_value = self.mock_template

        with pytest.raises(HTTPException) as exc_info:
            self.repository.create(data, self.content)

        assert exc_info.value.status_code == 400
        assert "already exists" in exc_info.value.detail

    def test_update_keeps_unset_fields(self):
        self.mock_db.query.return_value.filter.return_value.first.return_value = self.mock_template

        result = self.repository.update(self.template_id, PageTemplateUpdate(name="CV", is_active=False))

        assert result.name == "CV"
        assert result.is_active is False
        assert result.slug == "portfolio"
        self.mock_db.commit.assert_called_once()

    def test_update_replaces_content(self):
        self.mock_db.query.return_value.filter.return_value.first.return_value = self.mock_template

        self.repository.update(
            self.template_id,
            PageTemplateUpdate(content_json=self.content.to_json()),
            self.content,
        )

        assert self.mock_template.content_json == self.content.to_json()

    def test_update_slug_conflict(self):
        other = Mock()
        other.id = uuid4()
        self.mock_db.query.return_value.filter.return_value.first.side_effect = [self.mock_template, other]

        with pytest.raises(HTTPException) as exc_info:
            self.repository.update(self.template_id, PageTemplateUpdate(slug="taken"))

        assert exc_info.value.status_code == 400

    def test_delete(self):
        self.mock_db.query.return_value.filter.return_value.first.return_value = self.mock_template

        assert self.repository.delete(self.template_id) == self.mock_template
        self.mock_db.delete.assert_called_once_with(self.mock_template)
        self.mock_db.commit.assert_called_once()

    def test_commit_failure_rolls_back(self):
        self.mock_db.query.return_value.filter.return_value.first.return_value = self.mock_template
        self.mock_db.commit.side_effect = SQLAlchemyError("boom")

        with pytest.raises(SQLAlchemyError):
            self.repository.delete(self.template_id)

        self.mock_db.rollback.assert_called_once()
