"""Core plugin that does nothing."""

from __future__ import annotations

from typing import Any

from slothgen.plugin import AppUtils, Plugin, Request, Result

PLUGIN_VERSION = "prometheus/slo/v1"
PLUGIN_ID = "sloth.dev/core/noop/v1"


class NoopPlugin(Plugin):
    """Leaves the result untouched."""

    def process_slo(self, request: Request, result: Result) -> None:
        return None


def new_plugin(config_data: Any, app_utils: AppUtils) -> NoopPlugin:
    """Build the plugin; any configuration is ignored."""
    return NoopPlugin()