"""Exception types raised by the extraction pipeline."""

from typing import Optional


class NewsTrackError(Exception):
    """Base class for pipeline errors."""

    suggestion: Optional[str] = None

    def __init__(self, message: str, suggestion: Optional[str] = None) -> None:
        super().__init__(message)
        if suggestion is not None:
            self.suggestion = suggestion


class InputError(NewsTrackError):
    """Missing or malformed URL / outlet name."""

    suggestion = "Provide a website URL (e.g. https://www.bbc.com) or an outlet name."


class UpstreamUnreachable(NewsTrackError):
    """A target site or the search engine could not be reached."""

    suggestion = "Check that the website is online and reachable, then try again."


class FetchError(UpstreamUnreachable):
    """Static HTTP fetch failed (non-2xx, timeout or network error)."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class NavigationError(UpstreamUnreachable):
    """Rendered navigation failed under every load condition."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to load {url} in browser: {reason}")
        self.url = url
        self.reason = reason


class EmptyResult(NewsTrackError):
    """The site was reachable but no journalist survived cleaning."""

    suggestion = (
        "The website structure may not be compatible with current scraping "
        "methods. Try an article or author listing page instead of the homepage."
    )


class PersistenceUnavailable(NewsTrackError):
    """The journalist store could not be read or written."""

    suggestion = "Results were not saved. Check the database path and permissions."
