"""Runtime execution context for the build pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .client import GridscaleClient


class Context[P]:
    """Runtime state passed through the build chain."""

    def __init__(
        self,
        target: P,
        *,
        client: GridscaleClient | None = None,
        dry_run: bool = False,
    ) -> None:
        self.target = target
        self._client = client
        self.dry_run = dry_run

    @property
    def client(self) -> GridscaleClient:
        """The API client; resources that talk to gridscale require one."""
        if self._client is None:
            raise RuntimeError("No gridscale client configured for this build")
        return self._client
