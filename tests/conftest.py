"""Pytest-wide fixtures and fakes for NewsTrack tests."""

import os
import tempfile

# Set BEFORE any imports of newstrack.config so module constants pick them up
os.environ["NEWSTRACK_DB_PATH"] = os.path.join(
    tempfile.mkdtemp(prefix="newstrack-tests-"), "newstrack.db"
)
os.environ["NEWSTRACK_RENDERING_ENABLED"] = "false"
os.environ["NEWSTRACK_ANALYZER_USE_LLM"] = "false"
os.environ["NEWSTRACK_SETTLE_DELAY"] = "0"
os.environ["NEWSTRACK_SUBPAGE_SETTLE_DELAY"] = "0"
os.environ.pop("ANTHROPIC_API_KEY", None)

from contextlib import asynccontextmanager
from datetime import date
from typing import Dict, Iterable, Optional

import httpx
import pytest

from newstrack import config
from newstrack.db.database import init_db
from newstrack.models.schemas import JournalistRecord
from newstrack.services.errors import FetchError
from newstrack.services.page import PageSession, parse_html


class FakeSession(PageSession):
    """PageSession serving canned HTML keyed by URL; unknown URLs 404."""

    def __init__(self, pages: Dict[str, str], kind: str = "static") -> None:
        super().__init__()
        self.pages = pages
        self.kind = kind
        self.loaded = []

    async def load(self, url, sub_page=False):
        self.loaded.append(url)
        if url not in self.pages:
            raise FetchError(url, "HTTP 404")
        self.current = parse_html(self.pages[url])
        self.current_url = url
        return self.current


class FakePool:
    """Stands in for BrowserPool: hands out rendered FakeSessions."""

    def __init__(self, pages: Dict[str, str], started: bool = True) -> None:
        self.pages = pages
        self.started = started
        self.sessions = []

    @asynccontextmanager
    async def session(self):
        session = FakeSession(self.pages, kind="rendered")
        self.sessions.append(session)
        yield session


def html_client(pages: Dict[str, str], status_for_missing: int = 404) -> httpx.AsyncClient:
    """AsyncClient answering GETs from a dict of URL -> HTML."""

    by_url = {url.rstrip("/"): html for url, html in pages.items()}

    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url).rstrip("/")
        if url in by_url:
            return httpx.Response(200, text=by_url[url])
        return httpx.Response(status_for_missing, text="")

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture(autouse=True)
def temp_db(tmp_path, monkeypatch):
    """Give every test its own SQLite database."""
    db_path = tmp_path / "newstrack.db"
    monkeypatch.setattr(config, "DATABASE_PATH", db_path)
    init_db()
    return db_path


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def fake_pool():
    return FakePool


@pytest.fixture
def make_client():
    return html_client


@pytest.fixture
def make_record():
    def _make(
        record_id: int,
        name: str,
        section: str = "Politics",
        article_count: int = 10,
        topics: Optional[Iterable[str]] = None,
        keywords: Optional[Iterable[str]] = None,
        source: str = "ndtv.com",
        **extra,
    ) -> JournalistRecord:
        return JournalistRecord(
            id=record_id,
            name=name,
            section=section,
            beat=section,
            article_count=article_count,
            latest_article=f"Latest {section} Coverage",
            date=date(2024, 5, 1),
            topics=list(topics) if topics is not None else [section, "Analysis"],
            keywords=list(keywords) if keywords is not None else ["news", section.lower()],
            expertise=[section, "Reporting"],
            source=source,
            provenance={"article_count": "estimated"},
            **extra,
        )

    return _make
