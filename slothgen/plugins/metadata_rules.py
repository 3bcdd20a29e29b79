"""Core plugin that generates the SLO metadata recording rules."""

from __future__ import annotations

import math
from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from slothgen.conventions import (
    PROM_SLO_MODE_LABEL_NAME,
    PROM_SLO_OBJECTIVE_LABEL_NAME,
    PROM_SLO_SPEC_LABEL_NAME,
    PROM_SLO_VERSION_LABEL_NAME,
    format_float,
    get_sli_error_metric,
    get_slo_id_prom_labels,
    labels_to_prom_filter,
    merge_labels,
)
from slothgen.model import Info, MWMBAlertGroup, PromSLO, Rule
from slothgen.plugin import AppUtils, Plugin, PluginError, Request, Result
from slothgen.template import Template, TemplateError

PLUGIN_VERSION = "prometheus/slo/v1"
PLUGIN_ID = "sloth.dev/core/metadata_rules/v1"

METRIC_SLO_OBJECTIVE_RATIO = "slo:objective:ratio"
METRIC_SLO_ERROR_BUDGET_RATIO = "slo:error_budget:ratio"
METRIC_SLO_TIME_PERIOD_DAYS = "slo:time_period:days"
METRIC_SLO_CURRENT_BURN_RATE_RATIO = "slo:current_burn_rate:ratio"
METRIC_SLO_PERIOD_BURN_RATE_RATIO = "slo:period_burn_rate:ratio"
METRIC_SLO_PERIOD_ERROR_BUDGET_REMAINING_RATIO = "slo:period_error_budget_remaining:ratio"
METRIC_SLO_INFO = "sloth_slo_info"

_BURN_RATE_EXPR_TPL = Template(
    """{{ .SLIErrorMetric }}{{ .MetricFilter }}
/ on({{ .SLOGroup }}) group_left
{{ .ErrorBudgetRatioMetric }}{{ .MetricFilter }}
"""
)


def _labels_to_prom_group(labels: Mapping[str, str]) -> str:
    return ", ".join(sorted(labels))


def _format_float_fixed(value: float) -> str:
    """Shortest decimal form of a float, never in exponent notation."""
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value.is_integer():
        return str(int(value))
    return format(Decimal(repr(value)), "f")


def _burn_rate_expr(metric: str, slo_filter: str, slo_group: str) -> str:
    return _BURN_RATE_EXPR_TPL.render(
        {
            "SLIErrorMetric": metric,
            "MetricFilter": slo_filter,
            "SLOGroup": slo_group,
            "ErrorBudgetRatioMetric": METRIC_SLO_ERROR_BUDGET_RATIO,
        }
    )


def _generate_metadata_rules(info: Info, slo: PromSLO, alerts: MWMBAlertGroup) -> list[Rule]:
    labels = merge_labels(get_slo_id_prom_labels(slo), slo.labels)
    objective_ratio = format_float(float(slo.objective) / 100)
    slo_filter = labels_to_prom_filter(labels)
    slo_group = _labels_to_prom_group(labels)

    try:
        current_burn_rate_expr = _burn_rate_expr(
            get_sli_error_metric(alerts.page_quick.short_window), slo_filter, slo_group
        )
    except TemplateError as exc:
        raise PluginError(
            "could not render current burn rate prometheus metadata recording rule "
            f"expression: {exc}"
        ) from exc
    try:
        period_burn_rate_expr = _burn_rate_expr(
            get_sli_error_metric(slo.time_window), slo_filter, slo_group
        )
    except TemplateError as exc:
        raise PluginError(
            "could not render period burn rate prometheus metadata recording rule "
            f"expression: {exc}"
        ) from exc

    period_days = slo.time_window.total_seconds() / 3600 / 24

    return [
        Rule(
            record=METRIC_SLO_OBJECTIVE_RATIO,
            expr=f"vector({objective_ratio})",
            labels=dict(labels),
        ),
        Rule(
            record=METRIC_SLO_ERROR_BUDGET_RATIO,
            expr=f"vector(1-{objective_ratio})",
            labels=dict(labels),
        ),
        Rule(
            record=METRIC_SLO_TIME_PERIOD_DAYS,
            expr=f"vector({format_float(period_days)})",
            labels=dict(labels),
        ),
        Rule(
            record=METRIC_SLO_CURRENT_BURN_RATE_RATIO,
            expr=current_burn_rate_expr,
            labels=dict(labels),
        ),
        Rule(
            record=METRIC_SLO_PERIOD_BURN_RATE_RATIO,
            expr=period_burn_rate_expr,
            labels=dict(labels),
        ),
        Rule(
            record=METRIC_SLO_PERIOD_ERROR_BUDGET_REMAINING_RATIO,
            expr=f"1 - {METRIC_SLO_PERIOD_BURN_RATE_RATIO}{slo_filter}",
            labels=dict(labels),
        ),
        Rule(
            record=METRIC_SLO_INFO,
            expr="vector(1)",
            labels=merge_labels(
                labels,
                {
                    PROM_SLO_VERSION_LABEL_NAME: info.version,
                    PROM_SLO_MODE_LABEL_NAME: str(info.mode),
                    PROM_SLO_SPEC_LABEL_NAME: info.spec,
                    PROM_SLO_OBJECTIVE_LABEL_NAME: _format_float_fixed(slo.objective),
                },
            ),
        ),
    ]


class MetadataRulesPlugin(Plugin):
    """Generates the informational recording rules of an SLO."""

    def process_slo(self, request: Request, result: Result) -> None:
        result.slo_rules.metadata_rec_rules.rules = _generate_metadata_rules(
            request.info, request.slo, request.mwmb_alert_group
        )


def new_plugin(config_data: Any, app_utils: AppUtils) -> MetadataRulesPlugin:
    """Build the plugin; it takes no configuration."""
    return MetadataRulesPlugin()