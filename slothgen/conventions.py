"""Naming conventions and small helpers shared by the rule generators."""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import timedelta
from decimal import Decimal

from slothgen.model import PromSLO

PROM_SLI_ERROR_METRIC_FMT = "slo:sli_error:ratio_rate%s"
PROM_SLO_ID_LABEL_NAME = "sloth_id"
PROM_SLO_MODE_LABEL_NAME = "sloth_mode"
PROM_SLO_NAME_LABEL_NAME = "sloth_slo"
PROM_SLO_OBJECTIVE_LABEL_NAME = "sloth_objective"
PROM_SLO_SERVICE_LABEL_NAME = "sloth_service"
PROM_SLO_SEVERITY_LABEL_NAME = "sloth_severity"
PROM_SLO_SPEC_LABEL_NAME = "sloth_spec"
PROM_SLO_VERSION_LABEL_NAME = "sloth_version"
PROM_SLO_WINDOW_LABEL_NAME = "sloth_window"

_MS = 1
_SECOND = 1000 * _MS
_MINUTE = 60 * _SECOND
_HOUR = 60 * _MINUTE
_DAY = 24 * _HOUR
_WEEK = 7 * _DAY
_YEAR = 365 * _DAY

# (unit, size in milliseconds, only used when it divides the rest exactly)
_DURATION_UNITS = (
    ("y", _YEAR, True),
    ("w", _WEEK, True),
    ("d", _DAY, False),
    ("h", _HOUR, False),
    ("m", _MINUTE, False),
    ("s", _SECOND, False),
    ("ms", _MS, False),
)

_QUOTE_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
}


def duration_to_prom_str(window: timedelta) -> str:
    """Format a duration the way Prometheus writes durations (e.g. ``5m``, ``30d``)."""
    ms = window // timedelta(milliseconds=1)
    if ms < 0:
        raise ValueError(f"negative duration: {window}")
    if ms == 0:
        return "0s"
    parts = []
    for unit, size, exact in _DURATION_UNITS:
        if exact and ms % size:
            continue
        count, ms = divmod(ms, size)
        if count:
            parts.append(f"{count}{unit}")
    return "".join(parts)


def get_sli_error_metric(window: timedelta) -> str:
    """Name of the SLI error ratio recording rule for a window."""
    return PROM_SLI_ERROR_METRIC_FMT % duration_to_prom_str(window)


def get_slo_id_prom_labels(slo: PromSLO) -> dict[str, str]:
    """Labels that identify an SLO in Prometheus."""
    return {
        PROM_SLO_ID_LABEL_NAME: slo.id,
        PROM_SLO_NAME_LABEL_NAME: slo.name,
        PROM_SLO_SERVICE_LABEL_NAME: slo.service,
    }


def merge_labels(*label_sets: Mapping[str, str] | None) -> dict[str, str]:
    """Merge label mappings into a new dict; later mappings win."""
    merged: dict[str, str] = {}
    for labels in label_sets:
        if labels:
            merged.update(labels)
    return merged


def _quote(value: str) -> str:
    out = []
    for char in value:
        if char in _QUOTE_ESCAPES:
            out.append(_QUOTE_ESCAPES[char])
        elif char.isprintable():
            out.append(char)
        elif ord(char) < 0x80:
            out.append(f"\\x{ord(char):02x}")
        elif ord(char) <= 0xFFFF:
            out.append(f"\\u{ord(char):04x}")
        else:
            out.append(f"\\U{ord(char):08x}")
    return '"' + "".join(out) + '"'


def labels_to_prom_filter(labels: Mapping[str, str]) -> str:
    """Render labels as a Prometheus selector, sorted by label name."""
    body = ", ".join(f"{name}={_quote(labels[name])}" for name in sorted(labels))
    return "{" + body + "}"


def format_float(value: float) -> str:
    """Format a float with the shortest representation, ``%g`` style."""
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    sign, digit_tuple, exponent = Decimal(repr(value)).as_tuple()
    prefix = "-" if sign else ""
    digits = "".join(map(str, digit_tuple)).rstrip("0")
    if not digits:
        return prefix + "0"
    point = len(digit_tuple) + exponent
    exp10 = point - 1
    if exp10 < -4 or exp10 >= 6:
        mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
        exp_sign = "+" if exp10 >= 0 else "-"
        return f"{prefix}{mantissa}e{exp_sign}{abs(exp10):02d}"
    if point <= 0:
        return f"{prefix}0.{'0' * -point}{digits}"
    if point >= len(digits):
        return prefix + digits + "0" * (point - len(digits))
    return f"{prefix}{digits[:point]}.{digits[point:]}"