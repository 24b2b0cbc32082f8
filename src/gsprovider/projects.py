"""Project model - the top-level build target."""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from .blueprints import Blueprint
from .client import GridscaleClient
from .context import Context

logger = logging.getLogger(__name__)


class Project(BaseModel):
    """A deployable set of blueprints; subclass to add domain-specific fields."""

    model_config = {"arbitrary_types_allowed": True}

    name: str
    description: str = ""
    labels: list[str] = Field(default_factory=list)
    blueprints: list[Blueprint] = Field(default_factory=list)

    def build(self, *, client: GridscaleClient | None = None, dry_run: bool = False) -> None:
        """Run every blueprint against the gridscale API reachable through ``client``."""
        ctx = Context(target=self, client=client, dry_run=dry_run)
        logger.info("Building project '%s'%s", self.name, " (dry run)" if dry_run else "")
        for blueprint in self.blueprints:
            blueprint.build(ctx)
