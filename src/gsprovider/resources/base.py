"""Shared plumbing for gridscale resource specifications."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, ClassVar

import httpx
from pydantic import BaseModel

from ..context import Context
from ..errors import GridscaleError, ResourceError
from ..projects import Project
from ..spec import Specification

logger = logging.getLogger(__name__)


class GridscaleResource(Specification[Project]):
    """A Specification whose attributes are validated by a pydantic model."""

    kind: ClassVar[str] = "resource"
    attributes: ClassVar[type[BaseModel]]

    def __init__(self, **attrs: Any) -> None:
        self.attrs = self.attributes.model_validate(attrs)

    def __str__(self) -> str:
        return f"{self.kind} '{self.attrs.name}'"  # type: ignore[attr-defined]

    def prefix(self, action: str, object_uuid: str | None = None) -> str:
        ident = object_uuid or self.attrs.name  # type: ignore[attr-defined]
        return f"{action} {self.kind} ({ident}) resource -"

    @contextmanager
    def failures(self, action: str, object_uuid: str | None = None) -> Iterator[None]:
        """Re-raise API and transport errors as ResourceError with an action prefix."""
        try:
            yield
        except (GridscaleError, httpx.HTTPError) as exc:
            if isinstance(exc, ResourceError):
                raise
            raise ResourceError(self.prefix(action, object_uuid), exc) from exc

    def labels_for(self, ctx: Context[Project]) -> list[str]:
        """Project labels followed by resource labels, without duplicates."""
        project_labels = getattr(ctx.target, "labels", [])
        own_labels = self.attrs.labels  # type: ignore[attr-defined]
        return list(dict.fromkeys([*project_labels, *own_labels]))
