"""The SLO plugin interface: requests, results and plugin configuration."""

from __future__ import annotations

import abc
import json
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from slothgen.model import Info, MWMBAlertGroup, PromSLO, PromSLORules

VERSION = "prometheus/slo/v1"
PLUGIN_FACTORY_NAME = "NewPlugin"
PLUGIN_ID_NAME = "PluginID"
PLUGIN_VERSION_NAME = "PluginVersion"


class PluginError(Exception):
    """Raised when a plugin cannot be built or fails to process an SLO."""


@dataclass
class AppUtils:
    """Application helpers handed to plugins."""

    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("slothgen"))


@dataclass
class Request:
    """Input of a plugin run."""

    info: Info = field(default_factory=Info)
    slo: PromSLO = field(default_factory=PromSLO)
    mwmb_alert_group: MWMBAlertGroup = field(default_factory=MWMBAlertGroup)


@dataclass
class Result:
    """Output of a plugin run; plugins fill it in place."""

    slo_rules: PromSLORules = field(default_factory=PromSLORules)


class Plugin(abc.ABC):
    """An SLO plugin that processes one SLO request into its result."""

    @abc.abstractmethod
    def process_slo(self, request: Request, result: Result) -> None:
        """Process the SLO in ``request``, updating ``result``."""


PluginFactory = Callable[[Any, AppUtils], Plugin]


def parse_config(config_data: bytes | str | Mapping[str, Any] | None) -> dict[str, Any]:
    """Decode raw JSON plugin configuration into a dict.

    Empty input is an error; ``null`` yields an empty configuration.
    """
    if isinstance(config_data, Mapping):
        return dict(config_data)
    if not config_data:
        raise PluginError("invalid plugin configuration: unexpected end of JSON input")
    try:
        decoded = json.loads(config_data)
    except (ValueError, UnicodeDecodeError) as exc:
        raise PluginError(f"invalid plugin configuration: {exc}") from exc
    if decoded is None:
        return {}
    if not isinstance(decoded, dict):
        raise PluginError(
            f"invalid plugin configuration: expected a JSON object, got {type(decoded).__name__}"
        )
    return decoded