"""Domain model for SLOs, multiwindow multiburn alerts and Prometheus rules."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import timedelta


class AlertSeverity(enum.Enum):
    """Severity of an SLO alert."""

    UNKNOWN = "unknown"
    PAGE = "page"
    TICKET = "ticket"

    def __str__(self) -> str:
        return self.value


class Mode(str, enum.Enum):
    """The execution mode that produced a set of rules."""

    CLI_GEN_KUBERNETES = "cli-gen-k8s"
    CLI_GEN_OPENSLO = "cli-gen-openslo"
    CLI_GEN_PROMETHEUS = "cli-gen-prom"
    CONTROLLER_GEN_KUBERNETES = "ctrl-gen-k8s"
    TEST = "test"

    def __str__(self) -> str:
        return self.value


@dataclass
class Info:
    """Information about the application generating the rules."""

    version: str = ""
    mode: Mode | str = ""
    spec: str = ""


@dataclass
class MWMBAlert:
    """One multiwindow multiburn alert: a short and a long window checked together."""

    id: str = ""
    short_window: timedelta = timedelta(0)
    long_window: timedelta = timedelta(0)
    burn_rate_factor: float = 0.0
    error_budget: float = 0.0
    severity: AlertSeverity = AlertSeverity.UNKNOWN


@dataclass
class MWMBAlertGroup:
    """The four multiwindow multiburn alerts that make up an SLO's alerting."""

    page_quick: MWMBAlert = field(default_factory=MWMBAlert)
    page_slow: MWMBAlert = field(default_factory=MWMBAlert)
    ticket_quick: MWMBAlert = field(default_factory=MWMBAlert)
    ticket_slow: MWMBAlert = field(default_factory=MWMBAlert)

    def windows(self) -> list[timedelta]:
        """Return every distinct window used by the group, shortest first."""
        alerts = (self.page_quick, self.page_slow, self.ticket_quick, self.ticket_slow)
        return sorted({w for a in alerts for w in (a.short_window, a.long_window)})


@dataclass
class PromAlertMeta:
    """Metadata for a generated Prometheus alert."""

    disable: bool = False
    name: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)


@dataclass
class PromSLIEvents:
    """An SLI defined by an error events query and a total events query."""

    error_query: str = ""
    total_query: str = ""


@dataclass
class PromSLIRaw:
    """An SLI defined by a query that already returns the error ratio."""

    error_ratio_query: str = ""


@dataclass
class PromSLI:
    """An SLI; exactly one of its kinds is normally set."""

    events: PromSLIEvents | None = None
    raw: PromSLIRaw | None = None


@dataclass
class PromSLO:
    """A Prometheus based SLO."""

    id: str = ""
    name: str = ""
    description: str = ""
    service: str = ""
    sli: PromSLI = field(default_factory=PromSLI)
    time_window: timedelta = timedelta(0)
    objective: float = 0.0
    labels: dict[str, str] = field(default_factory=dict)
    page_alert_meta: PromAlertMeta = field(default_factory=PromAlertMeta)
    ticket_alert_meta: PromAlertMeta = field(default_factory=PromAlertMeta)


@dataclass
class Rule:
    """A Prometheus recording or alerting rule."""

    record: str = ""
    alert: str = ""
    expr: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)


@dataclass
class PromRuleGroup:
    """A group of Prometheus rules evaluated together."""

    interval: timedelta | None = None
    rules: list[Rule] = field(default_factory=list)


@dataclass
class PromSLORules:
    """All the rule groups generated for one SLO."""

    sli_error_rec_rules: PromRuleGroup = field(default_factory=PromRuleGroup)
    metadata_rec_rules: PromRuleGroup = field(default_factory=PromRuleGroup)
    alert_rules: PromRuleGroup = field(default_factory=PromRuleGroup)