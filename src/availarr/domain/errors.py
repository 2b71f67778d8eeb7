"""Classified errors for every external call site.

Adapters never let raw transport errors escape: a failure ends up as exactly
one of the subclasses below.
"""

from __future__ import annotations

CSRF_MARKER = "csrf"

# Upstream bodies can be whole HTML error pages.
_MAX_BODY_IN_MESSAGE = 200


class AvailarrError(Exception):
    """Base class for all classified errors."""

    kind: str = "error"

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.url = url

    def user_message(self) -> str:
        """Single-line message combining the resolved URL and upstream message."""
        if self.url:
            return f"[{self.url}] {self.message}"
        return self.message


class ConfigurationError(AvailarrError):
    """A required URL or API key is missing."""

    kind = "configuration"

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason

    def user_message(self) -> str:
        return f"{self.reason}. Finish the setup in the extension settings."


class NetworkError(AvailarrError):
    """Timeout, DNS failure, refused connection, ..."""

    kind = "network"


class RemoteRejectionError(AvailarrError):
    """The upstream answered with a non-2xx status or an unusable body."""

    kind = "remote_rejection"

    def __init__(self, *, status: int, body: str, url: str | None = None) -> None:
        detail = body.strip()[:_MAX_BODY_IN_MESSAGE] or "(no body)"
        super().__init__(f"Server responded with {status}: {detail}", url=url)
        self.status = status
        self.body = body


class CsrfError(RemoteRejectionError):
    """The request service rejected a mutation because of CSRF protection."""

    kind = "csrf"

    @property
    def settings_url(self) -> str:
        return f"{self.url or ''}/settings/network"

    def user_message(self) -> str:
        return (
            f"{super().user_message()}\n\n"
            f'Fix: Go to {self.settings_url} and disable "Enable CSRF Protection".'
        )


class NotFoundError(AvailarrError):
    """The match cascade produced no candidate."""

    kind = "not_found"

    def __init__(self, *, title: str, media_type: str, url: str | None = None) -> None:
        super().__init__(
            f"Could not find {media_type} '{title}' on the request service", url=url
        )
        self.title = title
        self.media_type = media_type


class EmptyQueryError(AvailarrError):
    """A search was attempted with a blank query."""

    kind = "empty_query"

    def __init__(self, query: str = "") -> None:
        super().__init__("Search query is empty")
        self.query = query


def classify_rejection(
    *, status: int, body: str, url: str | None = None
) -> RemoteRejectionError:
    """Classify a non-2xx upstream response.

    The request service gives no structured error code for CSRF failures, so
    the body is searched for the marker case-insensitively.
    """
    if CSRF_MARKER in (body or "").lower():
        return CsrfError(status=status, body=body, url=url)
    return RemoteRejectionError(status=status, body=body, url=url)
