"""The default set of SLO plugins shipped with the package."""

from __future__ import annotations

from types import ModuleType

from slothgen.plugin import VERSION, PluginError, PluginFactory
from slothgen.plugins import alert_rules, debug, metadata_rules, noop, sli_rules

_DEFAULT_PLUGIN_MODULES: tuple[ModuleType, ...] = (
    alert_rules,
    debug,
    metadata_rules,
    noop,
    sli_rules,
)


def default_plugins() -> dict[str, PluginFactory]:
    """Return the default plugin factories keyed by plugin ID."""
    plugins: dict[str, PluginFactory] = {}
    for module in _DEFAULT_PLUGIN_MODULES:
        if module.PLUGIN_VERSION != VERSION:
            raise PluginError(f"unsuported plugin version: {module.PLUGIN_VERSION}")
        if not module.PLUGIN_ID:
            raise PluginError("invalid SLO plugin ID")
        plugins[module.PLUGIN_ID] = module.new_plugin
    return plugins


def get_plugin_factory(plugin_id: str) -> PluginFactory:
    """Return the factory of a default plugin, raising for unknown IDs."""
    try:
        return default_plugins()[plugin_id]
    except KeyError:
        raise PluginError(f"plugin {plugin_id!r} not found") from None