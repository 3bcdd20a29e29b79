"""Core plugin that generates the multiwindow multiburn SLO alert rules."""

from __future__ import annotations

from typing import Any

from slothgen.conventions import (
    PROM_SLO_NAME_LABEL_NAME,
    PROM_SLO_SERVICE_LABEL_NAME,
    PROM_SLO_SEVERITY_LABEL_NAME,
    PROM_SLO_WINDOW_LABEL_NAME,
    get_sli_error_metric,
    get_slo_id_prom_labels,
    labels_to_prom_filter,
    merge_labels,
)
from slothgen.model import MWMBAlert, MWMBAlertGroup, PromAlertMeta, PromSLO, Rule
from slothgen.plugin import AppUtils, Plugin, PluginError, Request, Result
from slothgen.template import Template, TemplateError

PLUGIN_VERSION = "prometheus/slo/v1"
PLUGIN_ID = "sloth.dev/core/alert_rules/v1"

_MWMB_ALERT_TPL = Template(
    """(
    max({{ .QuickShortMetric }}{{ .MetricFilter}} > ({{ .QuickShortBurnFactor }} * {{ .ErrorBudgetRatio }})) without ({{ .WindowLabel }})
    and
    max({{ .QuickLongMetric }}{{ .MetricFilter}} > ({{ .QuickLongBurnFactor }} * {{ .ErrorBudgetRatio }})) without ({{ .WindowLabel }})
)
or
(
    max({{ .SlowShortMetric }}{{ .MetricFilter }} > ({{ .SlowShortBurnFactor }} * {{ .ErrorBudgetRatio }})) without ({{ .WindowLabel }})
    and
    max({{ .SlowQuickMetric }}{{ .MetricFilter }} > ({{ .SlowQuickBurnFactor }} * {{ .ErrorBudgetRatio }})) without ({{ .WindowLabel }})
)
"""
)

_TITLE_FMT = "(%s) {{$labels.%s}} {{$labels.%s}} SLO error budget burn rate is too fast."
_SUMMARY_FMT = "{{$labels.%s}} {{$labels.%s}} SLO error budget burn rate is over expected."


def _alert_rule(slo: PromSLO, meta: PromAlertMeta, quick: MWMBAlert, slow: MWMBAlert) -> Rule:
    data = {
        "MetricFilter": labels_to_prom_filter(get_slo_id_prom_labels(slo)),
        # Quick and slow alerts share the same error budget.
        "ErrorBudgetRatio": float(quick.error_budget) / 100,
        "QuickShortMetric": get_sli_error_metric(quick.short_window),
        "QuickShortBurnFactor": float(quick.burn_rate_factor),
        "QuickLongMetric": get_sli_error_metric(quick.long_window),
        "QuickLongBurnFactor": float(quick.burn_rate_factor),
        "SlowShortMetric": get_sli_error_metric(slow.short_window),
        "SlowShortBurnFactor": float(slow.burn_rate_factor),
        "SlowQuickMetric": get_sli_error_metric(slow.long_window),
        "SlowQuickBurnFactor": float(slow.burn_rate_factor),
        "WindowLabel": PROM_SLO_WINDOW_LABEL_NAME,
    }
    try:
        expr = _MWMB_ALERT_TPL.render(data)
    except TemplateError as exc:
        raise PluginError(f"could not render alert expression: {exc}") from exc

    severity = str(quick.severity)
    extra_annotations = {
        "title": _TITLE_FMT
        % (severity, PROM_SLO_SERVICE_LABEL_NAME, PROM_SLO_NAME_LABEL_NAME),
        "summary": _SUMMARY_FMT % (PROM_SLO_SERVICE_LABEL_NAME, PROM_SLO_NAME_LABEL_NAME),
    }
    # SLO labels are not added here: alerts inherit them from the recording rules.
    extra_labels = {PROM_SLO_SEVERITY_LABEL_NAME: severity}

    return Rule(
        alert=meta.name,
        expr=expr,
        annotations=merge_labels(extra_annotations, meta.annotations),
        labels=merge_labels(extra_labels, meta.labels),
    )


def _generate_alert_rules(slo: PromSLO, alerts: MWMBAlertGroup) -> list[Rule]:
    rules = []
    if not slo.page_alert_meta.disable:
        try:
            rules.append(
                _alert_rule(slo, slo.page_alert_meta, alerts.page_quick, alerts.page_slow)
            )
        except PluginError as exc:
            raise PluginError(f"could not create page alert: {exc}") from exc
    if not slo.ticket_alert_meta.disable:
        try:
            rules.append(
                _alert_rule(slo, slo.ticket_alert_meta, alerts.ticket_quick, alerts.ticket_slow)
            )
        except PluginError as exc:
            raise PluginError(f"could not create ticket alert: {exc}") from exc
    return rules


class AlertRulesPlugin(Plugin):
    """Generates page and ticket alert rules for an SLO."""

    def process_slo(self, request: Request, result: Result) -> None:
        result.slo_rules.alert_rules.rules = _generate_alert_rules(
            request.slo, request.mwmb_alert_group
        )


def new_plugin(config_data: Any, app_utils: AppUtils) -> AlertRulesPlugin:
    """Build the plugin; it takes no configuration."""
    return AlertRulesPlugin()