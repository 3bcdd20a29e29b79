from datetime import timedelta

import pytest

from slothgen.model import (
    AlertSeverity,
    MWMBAlert,
    MWMBAlertGroup,
    PromAlertMeta,
    PromSLO,
    Rule,
)
from slothgen.plugin import AppUtils, Request, Result
from slothgen.plugins.alert_rules import AlertRulesPlugin, new_plugin


def base_alert_group():
    return MWMBAlertGroup(
        page_quick=MWMBAlert(
            id="10",
            short_window=timedelta(minutes=11),
            long_window=timedelta(minutes=12),
            burn_rate_factor=13,
            error_budget=1,
            severity=AlertSeverity.PAGE,
        ),
        page_slow=MWMBAlert(
            id="20",
            short_window=timedelta(minutes=21),
            long_window=timedelta(minutes=22),
            burn_rate_factor=23,
            error_budget=1,
            severity=AlertSeverity.PAGE,
        ),
        ticket_quick=MWMBAlert(
            id="30",
            short_window=timedelta(minutes=31),
            long_window=timedelta(minutes=32),
            burn_rate_factor=33,
            error_budget=1,
            severity=AlertSeverity.TICKET,
        ),
        ticket_slow=MWMBAlert(
            id="4",
            short_window=timedelta(minutes=41),
            long_window=timedelta(minutes=42),
            burn_rate_factor=43,
            error_budget=1,
            severity=AlertSeverity.TICKET,
        ),
    )


def page_meta():
    return PromAlertMeta(
        name="something1",
        labels={"custom-label": "test1"},
        annotations={"custom-annot": "test1"},
    )


def ticket_meta():
    return PromAlertMeta(
        name="something2",
        labels={"custom-label": "test2"},
        annotations={"custom-annot": "test2"},
    )


def base_slo():
    return PromSLO(
        id="test-svc-test",
        name="test",
        service="test-svc",
        page_alert_meta=page_meta(),
        ticket_alert_meta=ticket_meta(),
    )


PAGE_EXPR = """(
    max(slo:sli_error:ratio_rate11m{sloth_id="test-svc-test", sloth_service="test-svc", sloth_slo="test"} > (13 * 0.01)) without (sloth_window)
    and
    max(slo:sli_error:ratio_rate12m{sloth_id="test-svc-test", sloth_service="test-svc", sloth_slo="test"} > (13 * 0.01)) without (sloth_window)
)
or
(
    max(slo:sli_error:ratio_rate21m{sloth_id="test-svc-test", sloth_service="test-svc", sloth_slo="test"} > (23 * 0.01)) without (sloth_window)
    and
    max(slo:sli_error:ratio_rate22m{sloth_id="test-svc-test", sloth_service="test-svc", sloth_slo="test"} > (23 * 0.01)) without (sloth_window)
)
"""

TICKET_EXPR = """(
    max(slo:sli_error:ratio_rate31m{sloth_id="test-svc-test", sloth_service="test-svc", sloth_slo="test"} > (33 * 0.01)) without (sloth_window)
    and
    max(slo:sli_error:ratio_rate32m{sloth_id="test-svc-test", sloth_service="test-svc", sloth_slo="test"} > (33 * 0.01)) without (sloth_window)
)
or
(
    max(slo:sli_error:ratio_rate41m{sloth_id="test-svc-test", sloth_service="test-svc", sloth_slo="test"} > (43 * 0.01)) without (sloth_window)
    and
    max(slo:sli_error:ratio_rate42m{sloth_id="test-svc-test", sloth_service="test-svc", sloth_slo="test"} > (43 * 0.01)) without (sloth_window)
)
"""

PAGE_RULE = Rule(
    alert="something1",
    expr=PAGE_EXPR,
    labels={"custom-label": "test1", "sloth_severity": "page"},
    annotations={
        "custom-annot": "test1",
        "summary": "{{$labels.sloth_service}} {{$labels.sloth_slo}} SLO error budget burn rate is over expected.",
        "title": "(page) {{$labels.sloth_service}} {{$labels.sloth_slo}} SLO error budget burn rate is too fast.",
    },
)

TICKET_RULE = Rule(
    alert="something2",
    expr=TICKET_EXPR,
    labels={"custom-label": "test2", "sloth_severity": "ticket"},
    annotations={
        "custom-annot": "test2",
        "summary": "{{$labels.sloth_service}} {{$labels.sloth_slo}} SLO error budget burn rate is over expected.",
        "title": "(ticket) {{$labels.sloth_service}} {{$labels.sloth_slo}} SLO error budget burn rate is too fast.",
    },
)


@pytest.mark.parametrize(
    "slo, exp_rules",
    [
        (base_slo(), [PAGE_RULE, TICKET_RULE]),
        (
            PromSLO(
                id="test-svc-test",
                name="test",
                service="test-svc",
                page_alert_meta=page_meta(),
                ticket_alert_meta=PromAlertMeta(disable=True),
            ),
            [PAGE_RULE],
        ),
        (
            PromSLO(
                id="test-svc-test",
                name="test",
                service="test-svc",
                page_alert_meta=PromAlertMeta(disable=True),
                ticket_alert_meta=ticket_meta(),
            ),
            [TICKET_RULE],
        ),
    ],
    ids=["page-and-ticket", "page-only", "ticket-only"],
)
def test_plugin_generates_alert_rules(slo, exp_rules):
    plugin = new_plugin(None, AppUtils())
    result = Result()
    plugin.process_slo(Request(slo=slo, mwmb_alert_group=base_alert_group()), result)
    assert result.slo_rules.alert_rules.rules == exp_rules


def test_both_alerts_disabled_yields_no_rules():
    slo = PromSLO(
        id="x",
        page_alert_meta=PromAlertMeta(disable=True),
        ticket_alert_meta=PromAlertMeta(disable=True),
    )
    result = Result()
    AlertRulesPlugin().process_slo(Request(slo=slo, mwmb_alert_group=base_alert_group()), result)
    assert result.slo_rules.alert_rules.rules == []


def test_alert_metadata_overrides_generated_values():
    slo = base_slo()
    slo.page_alert_meta.labels = {"sloth_severity": "custom"}
    slo.page_alert_meta.annotations = {"title": "my title"}
    result = Result()
    new_plugin(b"{}", AppUtils()).process_slo(
        Request(slo=slo, mwmb_alert_group=base_alert_group()), result
    )
    page = result.slo_rules.alert_rules.rules[0]
    assert page.labels == {"sloth_severity": "custom"}
    assert page.annotations["title"] == "my title"


def test_plugin_leaves_other_rule_groups_untouched():
    result = Result()
    new_plugin(None, AppUtils()).process_slo(
        Request(slo=base_slo(), mwmb_alert_group=base_alert_group()), result
    )
    assert result.slo_rules.sli_error_rec_rules.rules == []
    assert result.slo_rules.metadata_rec_rules.rules == []