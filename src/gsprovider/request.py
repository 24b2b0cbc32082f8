"""Request descriptions and response classification."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from .errors import DecodeError, RequestError

logger = logging.getLogger(__name__)

HTTP_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"})


@dataclass(frozen=True)
class Request:
    """A single API call: target path, HTTP verb and optional JSON body."""

    path: str
    method: str = "GET"
    body: Any = None

    def __post_init__(self) -> None:
        if self.method not in HTTP_METHODS:
            raise ValueError(f"Unsupported HTTP method: '{self.method}'")

    def payload(self) -> bytes | None:
        """Serialize the body as JSON; serialization errors propagate."""
        if self.body is None:
            return None
        if isinstance(self.body, BaseModel):
            return self.body.model_dump_json(exclude_none=True).encode()
        return json.dumps(self.body).encode()


def classify[T: BaseModel](
    status_code: int,
    content: bytes,
    shape: type[T] | None = None,
    *,
    strict: bool = True,
) -> T | None:
    """Turn a raw response into a decoded value or raise its error envelope.

    Responses at or above 300 always raise RequestError carrying the HTTP
    status code. Successful bodies are decoded into ``shape``; a body that
    does not fit raises DecodeError, or is logged and dropped when
    ``strict`` is off.
    """
    if status_code >= 300:
        raise RequestError.from_body(status_code, content)

    if shape is None:
        return None

    logger.debug("Response body: %s", content.decode(errors="replace"))
    try:
        return shape.model_validate_json(content)
    except ValidationError as exc:
        if strict:
            raise DecodeError(status_code, content, str(exc)) from exc
        logger.warning("Ignoring undecodable %s response: %s", shape.__name__, exc)
        return None
