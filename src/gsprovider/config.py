"""Client configuration and poll policies."""

from __future__ import annotations

import os
from enum import StrEnum

from pydantic import BaseModel, Field, SecretStr

from .errors import ConfigurationError

DEFAULT_API_URL = "https://api.gridscale.io"


class ErrorPolicy(StrEnum):
    """What a poll loop does with an exception raised by a single poll."""

    FATAL = "fatal"
    TOLERATE = "tolerate"


class PollPolicy(BaseModel):
    """Deadline, cadence and per-poll error handling of a wait loop."""

    model_config = {"frozen": True}

    timeout: float = Field(60.0, gt=0)
    interval: float = Field(0.5, gt=0)
    on_error: ErrorPolicy = ErrorPolicy.FATAL


class ClientConfig(BaseModel):
    """Everything a GridscaleClient needs to reach the API."""

    model_config = {"frozen": True}

    api_url: str = DEFAULT_API_URL
    user_uuid: str
    api_token: SecretStr
    http_timeout: float = 30.0
    strict_decoding: bool = True

    request_poll: PollPolicy = PollPolicy(timeout=60.0, on_error=ErrorPolicy.TOLERATE)
    power_poll: PollPolicy = PollPolicy(timeout=120.0)
    service_poll: PollPolicy = PollPolicy(timeout=900.0, interval=5.0)

    @classmethod
    def from_env(cls, **overrides) -> ClientConfig:
        """Read credentials from GRIDSCALE_UUID, GRIDSCALE_TOKEN and GRIDSCALE_URL."""
        user_uuid = os.environ.get("GRIDSCALE_UUID")
        api_token = os.environ.get("GRIDSCALE_TOKEN")
        if not user_uuid or not api_token:
            raise ConfigurationError("GRIDSCALE_UUID and GRIDSCALE_TOKEN must be set")

        values = {
            "api_url": os.environ.get("GRIDSCALE_URL") or DEFAULT_API_URL,
            "user_uuid": user_uuid,
            "api_token": api_token,
        }
        values.update(overrides)
        return cls(**values)
