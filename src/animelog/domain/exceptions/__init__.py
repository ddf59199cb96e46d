"""Domain exceptions."""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    # Hey future me, we store message as an attribute so code can inspect it without parsing str(exception).
    # This is your base class - DON'T raise it directly! Always use a specific subclass so callers
    # (and the FastAPI exception handlers) can catch precisely.
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class ValidationError(DomainException):
    """Input validation failed.

    Raised for missing/empty titles, out-of-range scores, malformed ids.
    Never retried - the input won't get better by asking again.

    HTTP Status: 400
    """

    pass


class EntityNotFoundException(DomainException):
    """Raised when an entity is not found."""

    # Yo, this is for "get by ID" operations that fail - anime 123 isn't in db.json. NOT for
    # "Jikan has no match for this title" in the cover path - that one is an expected outcome
    # and comes back as None / CoverResolution(cover_image=None).
    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(f"{entity_type} with id {entity_id} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class DuplicateEntityException(DomainException):
    """Raised when trying to add an entry that is already in the list.

    HTTP Status: 409
    """

    def __init__(self, entity_type: str, entity_id: Any, message: str | None = None) -> None:
        super().__init__(message or f"{entity_type} with id {entity_id} already exists")
        self.entity_type = entity_type
        self.entity_id = entity_id


class ExternalServiceError(DomainException):
    """An external service (Jikan, image CDN) failed.

    HTTP Status: 502 (Bad Gateway)
    """

    pass


class UpstreamError(ExternalServiceError):
    """Jikan answered with a non-2xx status (or didn't answer at all).

    status_code is None for transport failures (timeout, connection refused).
    """

    def __init__(
        self,
        status_code: int | None,
        body: str = "",
        message: str | None = None,
    ) -> None:
        if message is None:
            if status_code is None:
                message = f"Jikan API request failed: {body}"
            else:
                message = f"Jikan API responded with status {status_code}: {body}"
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class UpstreamRateLimited(UpstreamError):
    """Jikan answered 429 even though we throttle locally.

    Hey future me - this is separate so callers can back off instead of hammering again.
    We NEVER retry this ourselves; retries (if any) belong to whoever called us.

    HTTP Status: 429
    """

    def __init__(self, body: str = "", retry_after: float | None = None) -> None:
        super().__init__(
            429,
            body,
            message=f"Jikan API rate limit exceeded (429): {body}",
        )
        self.retry_after = retry_after


class DownloadError(ExternalServiceError):
    """Downloading a cover image from the asset host failed.

    HTTP Status: 502
    """

    def __init__(self, url: str, status_code: int | None, reason: str = "") -> None:
        detail = f"status {status_code}" if status_code is not None else reason
        super().__init__(f"Failed to download image from {url}: {detail}")
        self.url = url
        self.status_code = status_code


class StorageError(DomainException):
    """Local filesystem operation failed (mkdir, write, unreadable db.json).

    HTTP Status: 500
    """

    def __init__(self, message: str, path: Any = None) -> None:
        super().__init__(message)
        self.path = path


__all__ = [
    "DomainException",
    "DownloadError",
    "DuplicateEntityException",
    "EntityNotFoundException",
    "ExternalServiceError",
    "StorageError",
    "UpstreamError",
    "UpstreamRateLimited",
    "ValidationError",
]
