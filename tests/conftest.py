import copy
from datetime import datetime, timedelta, timezone
from typing import Callable, Generator
import jwt
import pytest
from sqlalchemy import StaticPool
from sqlalchemy.orm import sessionmaker, Session
from fastapi.testclient import TestClient
from faker import Faker

from main import app
from core.settings import settings
from db.session import create_db_engine, get_db
from models.base import Base
from models import Page, PageTemplate, PageTemplateCategory
from services.cache_service import InMemoryCacheService, get_cache_service

fake = Faker()

# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_db_engine(SQLALCHEMY_DATABASE_URL, poolclass=StaticPool)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


COLUMNS_DOCUMENT = {
    "blocks": [
        {
            "id": "hero-1",
            "type": "hero",
            "props": {"title": "Ana Souza", "subtitle": "Product designer"},
        },
        {
            "id": "cols-1",
            "type": "columns",
            "props": {
                "columns": "2",
                "items": [
                    {
                        "title": "Sobre",
                        "blocks": [
                            {"id": "text-1", "type": "text", "props": {"content": "Ola"}},
                        ],
                    },
                    {"title": "Skills"},
                ],
            },
        },
    ],
    "meta": {"theme": "minimal"},
}


@pytest.fixture
def columns_document() -> dict:
    """Hero followed by a two-column block with one nested text block."""
    return copy.deepcopy(COLUMNS_DOCUMENT)


@pytest.fixture
def make_nested_document() -> Callable[[int], dict]:
    """Build a document whose blocks nest `depth` levels deep through columns."""
    def build(depth: int) -> dict:
        blocks = [{"id": f"text-{depth}", "type": "text", "props": {"content": "leaf"}}]
        for level in range(depth - 1, 0, -1):
            blocks = [{
                "id": f"cols-{level}",
                "type": "columns",
                "props": {"items": [{"title": f"Level {level}", "blocks": blocks}]},
            }]
        return {"blocks": blocks}

    return build


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a test database session."""
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def cache() -> InMemoryCacheService:
    return InMemoryCacheService()


@pytest.fixture(scope="function")
def client(db_session: Session, cache: InMemoryCacheService) -> Generator[TestClient, None, None]:
    """Create a test client with database session and cache overrides."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cache_service] = lambda: cache
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_token(sub: str, role: str = "user", features: dict | None = None, expires_in: int = 3600) -> str:
    payload = {
        "sub": sub,
        "role": role,
        "email": fake.email(),
        "features": features or {},
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
        "iat": datetime.now(timezone.utc),
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


@pytest.fixture
def author_id() -> str:
    return fake.uuid4()


@pytest.fixture
def author_headers(author_id: str) -> dict:
    return {"Authorization": f"Bearer {make_token(author_id)}"}


@pytest.fixture
def admin_headers() -> dict:
    return {"Authorization": f"Bearer {make_token(fake.uuid4(), role='admin')}"}


@pytest.fixture
def sample_template(db_session: Session, columns_document: dict) -> PageTemplate:
    """Create an active page template holding the columns document."""
    template = PageTemplate(
        name="Portfolio",
        slug="portfolio",
        category=PageTemplateCategory.CV,
        content_json=columns_document,
        default_title="My portfolio",
        order=1,
    )
    db_session.add(template)
    db_session.commit()
    db_session.refresh(template)
    return template


@pytest.fixture
def sample_page(db_session: Session, author_id: str, columns_document: dict) -> Page:
    """Create a published page owned by the author."""
    page = Page(
        owner_id=author_id,
        title="Ana Souza",
        slug="ana-souza",
        content_json=columns_document,
        is_published=True,
    )
    db_session.add(page)
    db_session.commit()
    db_session.refresh(page)
    return page


@pytest.fixture
def token_factory() -> Callable[..., str]:
    return make_token
