"""SpecOp strategies: present, ensure and absent."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from .context import Context
from .spec import Specification

logger = logging.getLogger(__name__)


class SpecOp[P](ABC):
    """Wraps a Specification with conditional execution logic."""

    strategy: str = ""

    def __init__(self, spec: Specification[P]) -> None:
        self.spec = spec

    @abstractmethod
    def __call__(self, ctx: Context[P]) -> None: ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.spec})"


class Present[P](SpecOp[P]):
    """Create only if the resource doesn't exist."""

    strategy = "present"

    def __call__(self, ctx: Context[P]) -> None:
        if self.spec.exists(ctx):
            logger.debug("Skipping %s; already exists", self.spec)
        elif ctx.dry_run:
            logger.info("[DRY RUN] Would create %s", self.spec)
        else:
            logger.info("Creating %s", self.spec)
            self.spec.apply(ctx)


class Ensure[P](SpecOp[P]):
    """Create or update if remote state doesn't match."""

    strategy = "ensure"

    def __call__(self, ctx: Context[P]) -> None:
        if self.spec.equals(ctx):
            logger.debug("Skipping %s; up to date", self.spec)
        elif ctx.dry_run:
            logger.info("[DRY RUN] Would apply %s", self.spec)
        else:
            logger.info("Applying %s", self.spec)
            self.spec.apply(ctx)


class Absent[P](SpecOp[P]):
    """Delete if the resource exists."""

    strategy = "absent"

    def __call__(self, ctx: Context[P]) -> None:
        if not self.spec.exists(ctx):
            logger.debug("Skipping removal of %s; not present", self.spec)
        elif ctx.dry_run:
            logger.info("[DRY RUN] Would remove %s", self.spec)
        else:
            logger.info("Removing %s", self.spec)
            self.spec.remove(ctx)


STRATEGIES: dict[str, type[SpecOp]] = {
    op.strategy: op for op in (Present, Ensure, Absent)
}
