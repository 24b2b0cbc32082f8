"""gridscale_template - storage templates created from snapshots."""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from ..context import Context
from ..errors import ResourceError, ignore_status
from ..models import TemplateCreateRequest, TemplateProperties, TemplateUpdateRequest
from ..projects import Project
from ..spec import resource
from .base import GridscaleResource

logger = logging.getLogger(__name__)


class TemplateAttributes(BaseModel):
    model_config = {"extra": "forbid"}

    name: str = Field(min_length=1, max_length=64)
    snapshot_uuid: str = ""
    labels: list[str] = Field(default_factory=list)


@resource("gridscale_template")
class TemplateResource(GridscaleResource):
    """A template, identified by its name."""

    kind = "template"
    attributes = TemplateAttributes
    attrs: TemplateAttributes

    def find(self, ctx: Context[Project]) -> TemplateProperties | None:
        with self.failures("read"):
            templates = ctx.client.get_template_list()
        return next((t for t in templates if t.name == self.attrs.name), None)

    def exists(self, ctx: Context[Project]) -> bool:
        return self.find(ctx) is not None

    def equals(self, ctx: Context[Project]) -> bool:
        current = self.find(ctx)
        return current is not None and sorted(current.labels) == sorted(self.labels_for(ctx))

    def apply(self, ctx: Context[Project]) -> None:
        current = self.find(ctx)
        if current is None:
            if not self.attrs.snapshot_uuid:
                raise ResourceError(self.prefix("create"), "snapshot_uuid is required")
            body = TemplateCreateRequest(
                name=self.attrs.name,
                snapshot_uuid=self.attrs.snapshot_uuid,
                labels=self.labels_for(ctx),
            )
            with self.failures("create"):
                response = ctx.client.create_template(body)
            logger.info("Template %s has id %s", body.name, response.object_uuid)
            return

        body = TemplateUpdateRequest(name=self.attrs.name, labels=self.labels_for(ctx))
        with self.failures("update", current.object_uuid):
            ctx.client.update_template(current.object_uuid, body)

    def remove(self, ctx: Context[Project]) -> None:
        current = self.find(ctx)
        if current is None:
            return
        with self.failures("delete", current.object_uuid), ignore_status(404):
            ctx.client.delete_template(current.object_uuid)
