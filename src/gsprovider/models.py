"""Wire shapes for gridscale API requests and responses."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, RootModel

# -- Generic envelopes --


class CreateResponse(BaseModel):
    """Returned by every POST that starts an asynchronous operation."""

    object_uuid: str
    request_uuid: str
    server_uuid: str | None = None


class RequestStatusProperties(BaseModel):
    status: str = ""
    message: str = ""
    create_time: str = ""


class RequestStatus(RootModel[dict[str, RequestStatusProperties]]):
    """Operation status map keyed by request UUID."""

    def status_of(self, request_uuid: str) -> str:
        entry = self.root.get(request_uuid)
        return entry.status if entry is not None else ""


# -- Templates --


class TemplateProperties(BaseModel):
    object_uuid: str
    name: str = ""
    status: str = ""
    labels: list[str] = Field(default_factory=list)
    capacity: int | None = None
    create_time: str = ""
    change_time: str = ""


class Template(BaseModel):
    properties: TemplateProperties = Field(alias="template")


class TemplateList(BaseModel):
    items: dict[str, TemplateProperties] = Field(alias="templates", default_factory=dict)


class TemplateCreateRequest(BaseModel):
    name: str
    snapshot_uuid: str
    labels: list[str] = Field(default_factory=list)


class TemplateUpdateRequest(BaseModel):
    name: str | None = None
    labels: list[str] | None = None


# -- Servers --


class ServerProperties(BaseModel):
    object_uuid: str
    name: str = ""
    power: bool = False
    status: str = ""


class Server(BaseModel):
    properties: ServerProperties = Field(alias="server")


# -- PaaS --


class PaaSCredential(BaseModel):
    username: str = ""
    password: str = ""
    type: str = ""
    kubeconfig: str = ""


class PaaSServiceProperties(BaseModel):
    object_uuid: str
    name: str = ""
    status: str = ""
    labels: list[str] = Field(default_factory=list)
    credentials: list[PaaSCredential] = Field(default_factory=list)
    listen_ports: dict[str, dict[str, int]] = Field(default_factory=dict)
    security_zone_uuid: str = ""
    service_template_uuid: str = ""
    usage_in_minutes: int = 0
    current_price: float = 0.0
    parameters: dict[str, Any] = Field(default_factory=dict)
    create_time: str = ""
    change_time: str = ""


class PaaSService(BaseModel):
    properties: PaaSServiceProperties = Field(alias="paas_service")


class PaaSServiceList(BaseModel):
    items: dict[str, PaaSServiceProperties] = Field(alias="paas_services", default_factory=dict)


class PaaSServiceCreateRequest(BaseModel):
    name: str
    paas_service_template_uuid: str
    labels: list[str] = Field(default_factory=list)
    paas_security_zone_uuid: str | None = None
    parameters: dict[str, Any] = Field(default_factory=dict)


class PaaSServiceUpdateRequest(BaseModel):
    name: str | None = None
    labels: list[str] | None = None
    paas_service_template_uuid: str | None = None
    parameters: dict[str, Any] | None = None


class PaaSTemplateProperties(BaseModel):
    object_uuid: str
    name: str = ""
    category: str = ""
    release: str = ""
    version: str = ""


class PaaSTemplateList(BaseModel):
    items: dict[str, PaaSTemplateProperties] = Field(
        alias="paas_service_templates", default_factory=dict
    )


# -- Networks --


class ObjectRef(BaseModel):
    object_uuid: str


class NetworkRelations(BaseModel):
    paas_security_zones: list[ObjectRef] = Field(default_factory=list)


class NetworkProperties(BaseModel):
    object_uuid: str
    name: str = ""
    relations: NetworkRelations = Field(default_factory=NetworkRelations)


class NetworkList(BaseModel):
    items: dict[str, NetworkProperties] = Field(alias="networks", default_factory=dict)
