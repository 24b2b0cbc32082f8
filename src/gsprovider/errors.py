"""Exception types raised by the gridscale client and resource layer."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

logger = logging.getLogger(__name__)

NO_MESSAGE = "no error message received from server"


class GridscaleError(Exception):
    """Base class for all gsprovider errors."""


class ConfigurationError(GridscaleError):
    """Client configuration is missing or invalid."""


class RequestError(GridscaleError):
    """The API answered with a status code of 300 or above."""

    def __init__(
        self,
        status_code: int,
        status_message: str = "",
        error_message: str = "",
    ) -> None:
        self.status_code = status_code
        self.status_message = status_message
        self.error_message = error_message
        super().__init__(str(self))

    @classmethod
    def from_body(cls, status_code: int, body: bytes) -> RequestError:
        """Build an envelope from a raw error body; the status code always wins."""
        data: Any = None
        try:
            data = json.loads(body) if body else None
        except ValueError:
            logger.debug("Error body is not JSON: %r", body[:200])
        if not isinstance(data, dict):
            data = {}
        return cls(
            status_code,
            status_message=_as_text(data.get("status")),
            error_message=_as_text(data.get("message")),
        )

    @property
    def message(self) -> str:
        return self.error_message or NO_MESSAGE

    def __str__(self) -> str:
        return f"[Error] statuscode {self.status_code} returned: {self.message}"


class DecodeError(GridscaleError):
    """A successful response body did not match the expected shape."""

    def __init__(self, status_code: int, body: bytes, reason: str) -> None:
        self.status_code = status_code
        self.body = body
        self.reason = reason
        super().__init__(f"could not decode response (status {status_code}): {reason}")


class PollTimeoutError(GridscaleError, TimeoutError):
    """A poll loop reached its deadline before the target converged."""

    def __init__(self, target: str, message: str | None = None) -> None:
        self.target = target
        super().__init__(message or f"Timeout reached when waiting for {target}")


class PollCancelledError(GridscaleError):
    """A poll loop was cancelled through its cancellation token."""

    def __init__(self, target: str) -> None:
        self.target = target
        super().__init__(f"Cancelled while waiting for {target}")


class ResourceError(GridscaleError):
    """A declarative resource operation failed."""

    def __init__(self, prefix: str, detail: object) -> None:
        self.prefix = prefix
        super().__init__(f"{prefix} error: {detail}")


@contextmanager
def ignore_status(*codes: int) -> Iterator[None]:
    """Swallow a RequestError whose status code is one of ``codes``."""
    try:
        yield
    except RequestError as err:
        if err.status_code not in codes:
            raise
        logger.debug("Ignoring %s", err)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)
