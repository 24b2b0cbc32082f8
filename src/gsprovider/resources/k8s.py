"""gridscale_k8s - managed Kubernetes clusters on the PaaS platform."""

from __future__ import annotations

import logging
from typing import Any, Literal

from pydantic import BaseModel, Field

from ..context import Context
from ..errors import ResourceError, ignore_status
from ..models import (
    PaaSServiceCreateRequest,
    PaaSServiceProperties,
    PaaSServiceUpdateRequest,
)
from ..projects import Project
from ..spec import resource
from .base import GridscaleResource

logger = logging.getLogger(__name__)

K8S_TEMPLATE_CATEGORY = "kubernetes"

StorageType = Literal["storage", "storage_high", "storage_insane"]


class K8sAttributes(BaseModel):
    model_config = {"extra": "forbid"}

    name: str = Field(min_length=1, max_length=64)
    k8s_release: str = Field(min_length=1)
    worker_node_ram: int = Field(16, gt=0)
    worker_node_cores: int = Field(4, gt=0)
    worker_node_count: int = Field(3, gt=0)
    worker_node_storage: int = Field(30, gt=0)
    worker_node_storage_type: StorageType = "storage_insane"
    security_zone_uuid: str = ""
    labels: list[str] = Field(default_factory=list)

    def parameters(self) -> dict[str, Any]:
        return {
            "k8s_worker_node_ram": self.worker_node_ram,
            "k8s_worker_node_cores": self.worker_node_cores,
            "k8s_worker_node_count": self.worker_node_count,
            "k8s_worker_node_storage": self.worker_node_storage,
            "k8s_worker_node_storage_type": self.worker_node_storage_type,
        }


class ListenPort(BaseModel):
    name: str
    port: int


class K8sState(BaseModel):
    """What the API reports about a running cluster."""

    object_uuid: str
    name: str
    kubeconfig: str = ""
    listen_ports: list[ListenPort] = Field(default_factory=list)
    security_zone_uuid: str = ""
    network_uuid: str = ""
    k8s_release_computed: str = ""
    parameters: dict[str, Any] = Field(default_factory=dict)
    labels: list[str] = Field(default_factory=list)
    usage_in_minutes: int = 0
    current_price: float = 0.0
    status: str = ""
    create_time: str = ""
    change_time: str = ""


@resource("gridscale_k8s")
class K8sResource(GridscaleResource):
    """A Kubernetes PaaS service, identified by its name."""

    kind = "k8s"
    attributes = K8sAttributes
    attrs: K8sAttributes

    def __init__(self, **attrs: Any) -> None:
        super().__init__(**attrs)
        self.state: K8sState | None = None

    def release_templates(self, ctx: Context[Project]) -> dict[str, str]:
        """Map kubernetes release numbers to their PaaS template UUIDs."""
        with self.failures("read"):
            templates = ctx.client.get_paas_template_list()
        return {
            t.release: t.object_uuid for t in templates if t.category == K8S_TEMPLATE_CATEGORY
        }

    def template_uuid(self, releases: dict[str, str], action: str) -> str:
        release = self.attrs.k8s_release
        if release not in releases:
            valid = ",".join(sorted(releases))
            raise ResourceError(
                self.prefix(action),
                f"{release} is not a valid kubernetes release number. "
                f"Valid release numbers are: {valid}",
            )
        return releases[release]

    def find(self, ctx: Context[Project]) -> PaaSServiceProperties | None:
        with self.failures("read"):
            services = ctx.client.get_paas_service_list()
        return next((s for s in services if s.name == self.attrs.name), None)

    def exists(self, ctx: Context[Project]) -> bool:
        return self.find(ctx) is not None

    def equals(self, ctx: Context[Project]) -> bool:
        current = self.find(ctx)
        if current is None:
            return False
        releases = self.release_templates(ctx)
        if current.service_template_uuid != releases.get(self.attrs.k8s_release):
            return False
        params = self.attrs.parameters()
        if any(current.parameters.get(k) != v for k, v in params.items()):
            return False
        return sorted(current.labels) == sorted(self.labels_for(ctx))

    def apply(self, ctx: Context[Project]) -> None:
        current = self.find(ctx)
        if current is None:
            object_uuid = self._create(ctx)
        else:
            object_uuid = current.object_uuid
            self._update(ctx, current)
        self.state = self.read(ctx, object_uuid)

    def _create(self, ctx: Context[Project]) -> str:
        template_uuid = self.template_uuid(self.release_templates(ctx), "create")
        body = PaaSServiceCreateRequest(
            name=self.attrs.name,
            paas_service_template_uuid=template_uuid,
            labels=self.labels_for(ctx),
            paas_security_zone_uuid=self.attrs.security_zone_uuid or None,
            parameters=self.attrs.parameters(),
        )
        with self.failures("create"):
            response = ctx.client.create_paas_service(body)
        logger.info("PaaS service %s has id %s", body.name, response.object_uuid)
        return response.object_uuid

    def _update(self, ctx: Context[Project], current: PaaSServiceProperties) -> None:
        object_uuid = current.object_uuid
        body = PaaSServiceUpdateRequest(
            name=self.attrs.name,
            labels=self.labels_for(ctx),
            parameters=self.attrs.parameters(),
        )

        # only touch the release when it actually changed
        template_uuid = self.template_uuid(self.release_templates(ctx), "update")
        if template_uuid != current.service_template_uuid:
            body.paas_service_template_uuid = template_uuid

        with self.failures("update", object_uuid):
            ctx.client.update_paas_service(object_uuid, body)
            if body.paas_service_template_uuid is not None:
                ctx.client.wait_for_paas_service_template(object_uuid, template_uuid)

    def read(self, ctx: Context[Project], object_uuid: str) -> K8sState | None:
        """Fetch the live state of the cluster; None if it is gone."""
        service = None
        with self.failures("read", object_uuid), ignore_status(404):
            service = ctx.client.get_paas_service(object_uuid)
        if service is None:
            logger.debug("PaaS service %s no longer exists", object_uuid)
            return None

        props = service.properties
        releases = self.release_templates(ctx)
        computed = next(
            (rel for rel, uuid in releases.items() if uuid == props.service_template_uuid),
            None,
        )
        if computed is None:
            raise ResourceError(
                self.prefix("read", object_uuid),
                "could not find a release number of k8s service template UUID "
                f"{props.service_template_uuid}",
            )

        return K8sState(
            object_uuid=props.object_uuid,
            name=props.name,
            kubeconfig=props.credentials[0].kubeconfig if props.credentials else "",
            listen_ports=[
                ListenPort(name=port_name, port=port)
                for ports in props.listen_ports.values()
                for port_name, port in ports.items()
            ],
            security_zone_uuid=props.security_zone_uuid,
            network_uuid=self._network_uuid(ctx, props),
            k8s_release_computed=computed,
            parameters=props.parameters,
            labels=props.labels,
            usage_in_minutes=props.usage_in_minutes,
            current_price=props.current_price,
            status=props.status,
            create_time=props.create_time,
            change_time=props.change_time,
        )

    def _network_uuid(self, ctx: Context[Project], props: PaaSServiceProperties) -> str:
        """Find the network holding the service's security zone."""
        with self.failures("read", props.object_uuid):
            networks = ctx.client.get_network_list()
        for network in networks:
            zones = network.relations.paas_security_zones
            # each network holds at most one security zone
            if zones and zones[0].object_uuid == props.security_zone_uuid:
                return network.object_uuid
        return ""

    def remove(self, ctx: Context[Project]) -> None:
        current = self.find(ctx)
        if current is None:
            return
        with self.failures("delete", current.object_uuid), ignore_status(404):
            ctx.client.delete_paas_service(current.object_uuid)
        self.state = None
