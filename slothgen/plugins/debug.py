"""Core plugin that logs debugging information about the SLO being processed."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from slothgen.plugin import AppUtils, Plugin, PluginError, Request, Result, parse_config

PLUGIN_VERSION = "prometheus/slo/v1"
PLUGIN_ID = "sloth.dev/core/debug/v1"


@dataclass
class DebugConfig:
    """What the debug plugin logs."""

    custom_msg: str = ""
    show_result: bool = False
    show_request: bool = False


def _typed(data: dict[str, Any], key: str, kind: type, default: Any) -> Any:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, kind):
        raise PluginError(
            f"invalid plugin configuration: field {key!r} must be {kind.__name__}, "
            f"got {type(value).__name__}"
        )
    return value


def _config_from_data(config_data: Any) -> DebugConfig:
    data = parse_config(config_data)
    return DebugConfig(
        custom_msg=_typed(data, "msg", str, ""),
        show_result=_typed(data, "result", bool, False),
        show_request=_typed(data, "request", bool, False),
    )


class DebugPlugin(Plugin):
    """Logs a message, the request and/or the result at debug level."""

    def __init__(self, config: DebugConfig, app_utils: AppUtils) -> None:
        self.config = config
        self.app_utils = app_utils

    def process_slo(self, request: Request, result: Result) -> None:
        logger = self.app_utils.logger
        if self.config.custom_msg:
            logger.debug("%s", self.config.custom_msg)
        if self.config.show_request:
            logger.debug("%r", request)
        if self.config.show_result:
            logger.debug("%r", result)


def new_plugin(config_data: Any, app_utils: AppUtils) -> DebugPlugin:
    """Build the plugin from its JSON configuration."""
    return DebugPlugin(_config_from_data(config_data), app_utils)