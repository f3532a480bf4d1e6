"""Pydantic models for the NewsTrack API."""

from datetime import date, datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field


# measured: read from the page; inferred: derived from real page text by
# heuristics; estimated: synthetic placeholder, not a fact.
Provenance = Literal["measured", "inferred", "estimated"]


class RawRecord(BaseModel):
    """A candidate byline produced by an extraction strategy."""
    name: str
    profile_url: Optional[str] = None
    section_hint: Optional[str] = None
    section_provenance: Optional[Provenance] = None
    context: Optional[str] = None  # article path / nearby text used for section matching
    article_count: Optional[int] = None
    latest_article: Optional[str] = None


class JournalistRecord(BaseModel):
    """A cleaned journalist belonging to one outlet."""
    id: int
    name: str
    profile_url: Optional[str] = None
    section: str = "General"
    beat: str = "General"
    article_count: int = Field(0, ge=0)
    latest_article: str = "Latest Coverage"
    date: date
    topics: List[str] = []
    keywords: List[str] = []
    expertise: List[str] = []
    contact: Optional[str] = None
    email: Optional[str] = None
    twitter: Optional[str] = None
    source: str
    provenance: Dict[str, Provenance] = {}


class TopSection(BaseModel):
    """Section with the largest share of articles."""
    name: str = "Unknown"
    percentage: int = 0


class MostActive(BaseModel):
    """Journalist with the most articles."""
    name: str = "N/A"
    count: int = 0


class ExtractionSummary(BaseModel):
    """How a result was produced."""
    outlet: str
    total_journalists: int
    extraction_method: str
    timestamp: datetime
    persisted: bool = False
    cached: bool = False


class OutletResult(BaseModel):
    """Aggregate returned for one scrape request."""
    outlet: str
    detected_website: str
    journalists: List[JournalistRecord]
    total_articles: int
    top_section: TopSection
    most_active: MostActive
    summary: ExtractionSummary


class ScrapeRequest(BaseModel):
    """Body of POST /api/scrape: a website URL or an outlet name."""
    url: Optional[str] = None
    outlet: Optional[str] = None


class LocateResponse(BaseModel):
    """Website detection result."""
    outlet: str
    website: str


class OutletSummary(BaseModel):
    """A stored outlet with its journalist count."""
    outlet: str
    count: int
    last_updated: Optional[str] = None


class DatabaseStats(BaseModel):
    """Row counts across the journalist store."""
    total_journalists: int
    total_outlets: int
    total_topics: int
    total_keywords: int


class ErrorResponse(BaseModel):
    """Error body with an actionable suggestion."""
    error: str
    suggestion: Optional[str] = None
