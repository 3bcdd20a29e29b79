"""Core plugin that generates the SLI error ratio recording rules."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from slothgen.conventions import (
    PROM_SLO_WINDOW_LABEL_NAME,
    duration_to_prom_str,
    get_sli_error_metric,
    get_slo_id_prom_labels,
    labels_to_prom_filter,
    merge_labels,
)
from slothgen.model import MWMBAlertGroup, PromSLO, Rule
from slothgen.plugin import AppUtils, Plugin, PluginError, Request, Result, parse_config
from slothgen.template import Template, TemplateError

PLUGIN_VERSION = "prometheus/slo/v1"
PLUGIN_ID = "sloth.dev/core/sli_rules/v1"

TPL_KEY_WINDOW = "window"

_EVENTS_EXPR_FMT = "(%s)\n/\n(%s)\n"
_RAW_EXPR_FMT = "(%s)"

# Averaging ratios is statistically incorrect, so the ratios over the window are
# summed and divided by their count (each full ratio counts as 1).
_OPTIMIZED_EXPR_TPL = Template(
    """sum_over_time({{.metric}}{{.filter}}[{{.window}}])
/ ignoring ({{.windowKey}})
count_over_time({{.metric}}{{.filter}}[{{.window}}])
"""
)

_GenFunc = Callable[[PromSLO, timedelta, MWMBAlertGroup], Rule]


@dataclass
class SLIRulesConfig:
    """Configuration of the SLI rules plugin."""

    disable_optimized: bool = False


def _config_from_data(config_data: Any) -> SLIRulesConfig:
    data = parse_config(config_data)
    value = data.get("disableOptimized")
    if value is None:
        return SLIRulesConfig()
    if not isinstance(value, bool):
        raise PluginError(
            "invalid plugin configuration: field 'disableOptimized' must be bool, "
            f"got {type(value).__name__}"
        )
    return SLIRulesConfig(disable_optimized=value)


def _render(text: str | Template, data: Mapping[str, str]) -> str:
    if isinstance(text, Template):
        tpl = text
    else:
        try:
            tpl = Template(text)
        except TemplateError as exc:
            raise PluginError(f"could not create SLI expression template data: {exc}") from exc
    try:
        return tpl.render(data)
    except TemplateError as exc:
        raise PluginError(f"could not render SLI expression template: {exc}") from exc


def _sli_rule(slo: PromSLO, window: timedelta, str_window: str, expr: str) -> Rule:
    return Rule(
        record=get_sli_error_metric(window),
        expr=expr,
        labels=merge_labels(
            get_slo_id_prom_labels(slo),
            {PROM_SLO_WINDOW_LABEL_NAME: str_window},
            slo.labels,
        ),
    )


def _raw_rule(slo: PromSLO, window: timedelta, alerts: MWMBAlertGroup) -> Rule:
    assert slo.sli.raw is not None
    str_window = duration_to_prom_str(window)
    expr = _render(_RAW_EXPR_FMT % slo.sli.raw.error_ratio_query, {TPL_KEY_WINDOW: str_window})
    return _sli_rule(slo, window, str_window, expr)


def _events_rule(slo: PromSLO, window: timedelta, alerts: MWMBAlertGroup) -> Rule:
    events = slo.sli.events
    assert events is not None
    str_window = duration_to_prom_str(window)
    expr = _render(
        _EVENTS_EXPR_FMT % (events.error_query, events.total_query),
        {TPL_KEY_WINDOW: str_window},
    )
    return _sli_rule(slo, window, str_window, expr)


def _factory_rule(slo: PromSLO, window: timedelta, alerts: MWMBAlertGroup) -> Rule:
    if slo.sli.events is not None:
        return _events_rule(slo, window, alerts)
    if slo.sli.raw is not None:
        return _raw_rule(slo, window, alerts)
    raise PluginError("invalid SLI type")


def _optimized_rule(slo: PromSLO, window: timedelta, short_window: timedelta) -> Rule:
    if window == short_window:
        raise PluginError("can't optimize using the same shortwindow as the window to optimize")
    str_window = duration_to_prom_str(window)
    expr = _render(
        _OPTIMIZED_EXPR_TPL,
        {
            "metric": get_sli_error_metric(short_window),
            "filter": labels_to_prom_filter(get_slo_id_prom_labels(slo)),
            "window": str_window,
            "windowKey": PROM_SLO_WINDOW_LABEL_NAME,
        },
    )
    return _sli_rule(slo, window, str_window, expr)


def _optimized_factory_rule(slo: PromSLO, window: timedelta, alerts: MWMBAlertGroup) -> Rule:
    # Only the total period window is derived from the shortest SLI rule.
    if window == slo.time_window:
        return _optimized_rule(slo, window, alerts.page_quick.short_window)
    return _factory_rule(slo, window, alerts)


def _generate_sli_rules(slo: PromSLO, alerts: MWMBAlertGroup, gen: _GenFunc) -> list[Rule]:
    windows = [*alerts.windows(), slo.time_window]
    rules = []
    for window in windows:
        try:
            rules.append(gen(slo, window, alerts))
        except PluginError as exc:
            raise PluginError(
                f'could not create "{slo.id}" SLO rule for window '
                f"{duration_to_prom_str(window)}: {exc}"
            ) from exc
    return rules


class SLIRulesPlugin(Plugin):
    """Generates one SLI error ratio recording rule per alerting window."""

    def __init__(self, config: SLIRulesConfig | None = None) -> None:
        self.config = config or SLIRulesConfig()

    def process_slo(self, request: Request, result: Result) -> None:
        gen = _factory_rule if self.config.disable_optimized else _optimized_factory_rule
        result.slo_rules.sli_error_rec_rules.rules = _generate_sli_rules(
            request.slo, request.mwmb_alert_group, gen
        )


def new_plugin(config_data: Any, app_utils: AppUtils) -> SLIRulesPlugin:
    """Build the plugin from its JSON configuration."""
    return SLIRulesPlugin(_config_from_data(config_data))