import json
from datetime import timedelta

import pytest

from slothgen.conventions import (
    duration_to_prom_str,
    format_float,
    get_sli_error_metric,
    get_slo_id_prom_labels,
    labels_to_prom_filter,
    merge_labels,
)
from slothgen.model import PromSLO


@pytest.mark.parametrize(
    "window, expected",
    [
        (timedelta(minutes=5), "5m"),
        (timedelta(minutes=11), "11m"),
        (timedelta(minutes=30), "30m"),
        (timedelta(hours=1), "1h"),
        (timedelta(hours=2), "2h"),
        (timedelta(hours=6), "6h"),
        (timedelta(days=1), "1d"),
        (timedelta(days=3), "3d"),
        (timedelta(days=30), "30d"),
    ],
)
def test_duration_to_prom_str(window, expected):
    assert duration_to_prom_str(window) == expected


def test_duration_whole_weeks_and_zero():
    assert duration_to_prom_str(timedelta(days=7)) == "1w"
    assert duration_to_prom_str(timedelta(0)) == "0s"


def test_negative_duration_raises():
    with pytest.raises(ValueError):
        duration_to_prom_str(timedelta(minutes=-1))


def test_sli_error_metric_names():
    assert get_sli_error_metric(timedelta(minutes=5)) == "slo:sli_error:ratio_rate5m"
    assert get_sli_error_metric(timedelta(days=30)) == "slo:sli_error:ratio_rate30d"
    assert get_sli_error_metric(timedelta(minutes=11)) == "slo:sli_error:ratio_rate11m"


def test_slo_id_labels_and_filter():
    slo = PromSLO(id="test-svc-test", name="test", service="test-svc")
    labels = get_slo_id_prom_labels(slo)
    assert labels == {
        "sloth_id": "test-svc-test",
        "sloth_slo": "test",
        "sloth_service": "test-svc",
    }
    assert (
        labels_to_prom_filter(labels)
        == '{sloth_id="test-svc-test", sloth_service="test-svc", sloth_slo="test"}'
    )


def test_filter_sorts_keys():
    labels = {"sloth_slo": "test-name", "kind": "test", "sloth_service": "test-svc", "sloth_id": "test"}
    assert (
        labels_to_prom_filter(labels)
        == '{kind="test", sloth_id="test", sloth_service="test-svc", sloth_slo="test-name"}'
    )


def test_empty_filter():
    assert labels_to_prom_filter({}) == "{}"


def test_filter_quotes_values():
    value = 'a"b\\c\nd'
    result = labels_to_prom_filter({"k": value})
    assert result.startswith("{k=") and result.endswith("}")
    assert json.loads(result[len("{k="):-1]) == value


def test_merge_labels_later_wins_and_inputs_untouched():
    first = {"a": "1", "b": "2"}
    second = {"b": "3"}
    merged = merge_labels(first, None, second)
    assert merged == {"a": "1", "b": "3"}
    assert first == {"a": "1", "b": "2"}
    assert merge_labels() == {}


def test_format_float_values_from_rules():
    assert format_float(99.9 / 100) == "0.9990000000000001"
    assert format_float(99.99 / 100) == "0.9998999999999999"
    assert format_float(720 / 24) == "30"
    assert format_float(14.4) == "14.4"
    assert format_float((100 - 99.9) / 100) == "0.0009999999999999432"
    assert format_float(0.01) == "0.01"


@pytest.mark.parametrize("value", [1234567.0, 1e-05, 1e21, 0.5, -2.25, 123456.0, 0.0001])
def test_format_float_round_trips(value):
    assert float(format_float(value)) == value


def test_format_float_uses_exponent_for_large_and_tiny():
    assert "e+" in format_float(1234567.0)
    assert "e-" in format_float(1e-05)
    assert "e" not in format_float(123456.0)