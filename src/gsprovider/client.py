"""GridscaleClient - authenticated access to the gridscale API."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import Any

import httpx
from pydantic import BaseModel

from .config import ClientConfig, PollPolicy
from .errors import GridscaleError
from .models import (
    CreateResponse,
    NetworkList,
    NetworkProperties,
    PaaSService,
    PaaSServiceCreateRequest,
    PaaSServiceList,
    PaaSServiceProperties,
    PaaSServiceUpdateRequest,
    PaaSTemplateList,
    PaaSTemplateProperties,
    RequestStatus,
    Server,
    Template,
    TemplateCreateRequest,
    TemplateList,
    TemplateProperties,
    TemplateUpdateRequest,
)
from .poll import Poller
from .request import Request, classify

logger = logging.getLogger(__name__)


class GridscaleClient:
    """Owns one configuration and one HTTP connection pool."""

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: httpx.BaseTransport | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        self.config = config
        self._http = httpx.Client(timeout=config.http_timeout, transport=transport)
        self._clock = clock
        self._sleep = sleep

    def __enter__(self) -> GridscaleClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    def __repr__(self) -> str:
        return f"GridscaleClient(api_url={self.config.api_url!r})"

    # -- Transport --

    def _headers(self) -> dict[str, str]:
        return {
            "X-Auth-UserId": self.config.user_uuid,
            "X-Auth-Token": self.config.api_token.get_secret_value(),
            "Content-Type": "application/json",
        }

    def execute[T: BaseModel](self, request: Request, shape: type[T] | None = None) -> T | None:
        """Send one request and decode the reply into ``shape``.

        Transport failures propagate unchanged. Replies at or above 300 raise
        RequestError.
        """
        url = self.config.api_url.rstrip("/") + request.path
        content = request.payload()
        logger.debug("%s request sent to URL: %s", request.method, url)

        response = self._http.request(
            request.method,
            url,
            content=content,
            headers=self._headers(),
        )
        logger.debug("Status code returned: %d", response.status_code)
        return classify(
            response.status_code,
            response.content,
            shape,
            strict=self.config.strict_decoding,
        )

    def _fetch[T: BaseModel](self, path: str, shape: type[T]) -> T:
        result = self.execute(Request(path), shape)
        if result is None:
            # only reachable with strict_decoding disabled
            raise GridscaleError(f"GET {path} returned an undecodable body")
        return result

    def _create(
        self,
        path: str,
        body: BaseModel,
        cancel: threading.Event | None,
        policy: PollPolicy | None = None,
    ) -> CreateResponse:
        response = self.execute(Request(path, "POST", body), CreateResponse)
        if response is None:
            raise GridscaleError(f"POST {path} returned no operation identifier")
        self.wait_for_request_completion(response.request_uuid, cancel=cancel, policy=policy)
        return response

    # -- Polling --

    def poller(self, policy: PollPolicy) -> Poller:
        return Poller(policy, clock=self._clock, sleep=self._sleep)

    def wait_for_request_completion(
        self,
        request_uuid: str,
        *,
        cancel: threading.Event | None = None,
        policy: PollPolicy | None = None,
    ) -> None:
        """Block until the operation ``request_uuid`` reports status 'done'.

        ``policy`` defaults to ``config.request_poll``.
        """
        req = Request(f"/requests/{request_uuid}")

        def _done() -> bool:
            status = self.execute(req, RequestStatus)
            return status is not None and status.status_of(request_uuid) == "done"

        self.poller(policy or self.config.request_poll).wait(
            _done,
            request_uuid,
            cancel=cancel,
            message=f"Timeout reached when waiting for request {request_uuid} to complete",
        )
        logger.info("Request %s is done", request_uuid)

    def wait_for_server_power_status(
        self,
        server_uuid: str,
        power: bool,
        *,
        cancel: threading.Event | None = None,
    ) -> None:
        """Block until the server's power flag equals ``power``."""

        def _matches() -> bool:
            return self.get_server(server_uuid).properties.power == power

        self.poller(self.config.power_poll).wait(
            _matches,
            server_uuid,
            cancel=cancel,
            message=f"Timeout reached when waiting for server {server_uuid} to reach power={power}",
        )
        logger.info("The power status of server %s has changed to %s", server_uuid, power)

    def wait_for_paas_service_template(
        self,
        service_uuid: str,
        template_uuid: str,
        *,
        cancel: threading.Event | None = None,
    ) -> None:
        """Block until the PaaS service runs on ``template_uuid``."""

        def _live() -> bool:
            props = self.get_paas_service(service_uuid).properties
            return props.service_template_uuid == template_uuid

        self.poller(self.config.service_poll).wait(
            _live,
            service_uuid,
            cancel=cancel,
            message=(
                f"Timeout reached when waiting for PaaS service {service_uuid} "
                f"to run template {template_uuid}"
            ),
        )
        logger.info("PaaS service %s now runs template %s", service_uuid, template_uuid)

    # -- Templates --

    def get_template(self, template_uuid: str) -> Template:
        return self._fetch(f"/objects/templates/{template_uuid}", Template)

    def get_template_list(self) -> list[TemplateProperties]:
        return list(self._fetch("/objects/templates", TemplateList).items.values())

    def create_template(
        self,
        body: TemplateCreateRequest,
        *,
        cancel: threading.Event | None = None,
    ) -> CreateResponse:
        response = self._create("/objects/templates", body, cancel)
        logger.info("Created template '%s' (%s)", body.name, response.object_uuid)
        return response

    def update_template(self, template_uuid: str, body: TemplateUpdateRequest) -> None:
        self.execute(Request(f"/objects/templates/{template_uuid}", "PATCH", body))

    def delete_template(self, template_uuid: str) -> None:
        self.execute(Request(f"/objects/templates/{template_uuid}", "DELETE"))

    # -- Servers --

    def get_server(self, server_uuid: str) -> Server:
        return self._fetch(f"/objects/servers/{server_uuid}", Server)

    def set_server_power(
        self,
        server_uuid: str,
        power: bool,
        *,
        cancel: threading.Event | None = None,
    ) -> None:
        """Switch a server on or off and wait until the change is visible."""
        if self.get_server(server_uuid).properties.power == power:
            logger.debug("Server %s already has power=%s", server_uuid, power)
            return
        body: dict[str, Any] = {"power": power}
        self.execute(Request(f"/objects/servers/{server_uuid}/power", "PATCH", body))
        self.wait_for_server_power_status(server_uuid, power, cancel=cancel)

    def start_server(self, server_uuid: str, *, cancel: threading.Event | None = None) -> None:
        self.set_server_power(server_uuid, True, cancel=cancel)

    def stop_server(self, server_uuid: str, *, cancel: threading.Event | None = None) -> None:
        self.set_server_power(server_uuid, False, cancel=cancel)

    # -- PaaS --

    def get_paas_service(self, service_uuid: str) -> PaaSService:
        return self._fetch(f"/objects/paas/services/{service_uuid}", PaaSService)

    def get_paas_service_list(self) -> list[PaaSServiceProperties]:
        return list(self._fetch("/objects/paas/services", PaaSServiceList).items.values())

    def create_paas_service(
        self,
        body: PaaSServiceCreateRequest,
        *,
        cancel: threading.Event | None = None,
    ) -> CreateResponse:
        # cluster provisioning runs for minutes, well past request_poll
        policy = self.config.service_poll.model_copy(
            update={"on_error": self.config.request_poll.on_error}
        )
        response = self._create("/objects/paas/services", body, cancel, policy)
        logger.info("Created PaaS service '%s' (%s)", body.name, response.object_uuid)
        return response

    def update_paas_service(self, service_uuid: str, body: PaaSServiceUpdateRequest) -> None:
        self.execute(Request(f"/objects/paas/services/{service_uuid}", "PATCH", body))

    def delete_paas_service(self, service_uuid: str) -> None:
        self.execute(Request(f"/objects/paas/services/{service_uuid}", "DELETE"))

    def get_paas_template_list(self) -> list[PaaSTemplateProperties]:
        templates = self._fetch("/objects/paas/service_templates", PaaSTemplateList)
        return list(templates.items.values())

    # -- Networks --

    def get_network_list(self) -> list[NetworkProperties]:
        return list(self._fetch("/objects/networks", NetworkList).items.values())
