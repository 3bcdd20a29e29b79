# slothgen

`slothgen` turns Service Level Objective definitions into Prometheus
recording and alerting rules. It uses multiwindow, multi-burn-rate alerts.
A small plugin produces each kind of rule. A plugin takes a request, which
holds the SLO, its alert windows and generator info. It then fills in a
result.

## Installation

```
pip install slothgen
```

To run the test suite as well:

```
pip install "slothgen[test]"
pytest
```

## Core plugins

| Module                            | Plugin ID                          | Fills in                             |
|-----------------------------------|------------------------------------|--------------------------------------|
| `slothgen.plugins.sli_rules`      | `sloth.dev/core/sli_rules/v1`      | SLI error ratio recording rules      |
| `slothgen.plugins.metadata_rules` | `sloth.dev/core/metadata_rules/v1` | SLO metadata recording rules         |
| `slothgen.plugins.alert_rules`    | `sloth.dev/core/alert_rules/v1`    | Page and ticket alert rules          |
| `slothgen.plugins.debug`          | `sloth.dev/core/debug/v1`          | Nothing; logs the request and result |
| `slothgen.plugins.noop`           | `sloth.dev/core/noop/v1`           | Nothing                              |

Every plugin module has a `new_plugin(config_data, app_utils)` factory. It
takes the plugin's raw JSON configuration (bytes, a string or a mapping) and
an `AppUtils`, and returns a `Plugin` with a `process_slo(request, result)`
method. `Request`, `Result`, `AppUtils`, `Plugin` and `PluginError` live in
`slothgen.plugin`.

`slothgen.registry.default_plugins()` maps each plugin ID to its factory.
`get_plugin_factory(plugin_id)` returns one factory. It raises `PluginError`
for an unknown ID.

```python
from datetime import timedelta

from slothgen.model import MWMBAlert, MWMBAlertGroup, PromSLI, PromSLIEvents, PromSLO
from slothgen.plugin import AppUtils, Request, Result
from slothgen.registry import default_plugins, get_plugin_factory

slo = PromSLO(
    id="svc01-slo01",
    name="slo01",
    service="svc01",
    objective=99.9,
    time_window=timedelta(days=30),
    sli=PromSLI(events=PromSLIEvents(
        error_query='sum(rate(http_requests_total{code=~"5.."}[{{.window}}]))',
        total_query='sum(rate(http_requests_total[{{.window}}]))',
    )),
)
alerts = MWMBAlertGroup(
    page_quick=MWMBAlert(short_window=timedelta(minutes=5), long_window=timedelta(hours=1)),
    page_slow=MWMBAlert(short_window=timedelta(minutes=30), long_window=timedelta(hours=6)),
    ticket_quick=MWMBAlert(short_window=timedelta(hours=2), long_window=timedelta(days=1)),
    ticket_slow=MWMBAlert(short_window=timedelta(hours=6), long_window=timedelta(days=3)),
)

request = Request(slo=slo, mwmb_alert_group=alerts)
result = Result()
factory = get_plugin_factory("sloth.dev/core/sli_rules/v1")
factory(b"{}", AppUtils()).process_slo(request, result)

for rule in result.slo_rules.sli_error_rec_rules.rules:
    print(rule.record, rule.labels["sloth_window"])

print(sorted(default_plugins()))
```

### Plugin configuration

- `sli_rules` accepts `{"disableOptimized": true}`. By default the rule for
  the SLO's full time window is derived from the rule of the shortest page
  window, using `sum_over_time` / `count_over_time`. With the option set,
  that rule is computed from the SLI query like every other window.
- `debug` accepts `{"msg": "...", "request": true, "result": true}`. It
  logs these at debug level through `AppUtils.logger`.
- `alert_rules`, `metadata_rules` and `noop` ignore their configuration.

Malformed JSON raises `PluginError`, and so does a field of the wrong type.

## Rule conventions

`slothgen.conventions` holds the helpers that build the names and labels
the rules share:

- `get_sli_error_metric(window)` gives names such as
  `slo:sli_error:ratio_rate5m`.
- `get_slo_id_prom_labels(slo)` gives the `sloth_id`, `sloth_service` and
  `sloth_slo` labels.
- `merge_labels(*label_sets)` merges mappings; later ones win.
- `labels_to_prom_filter(labels)` renders a selector sorted by name, such as
  `{a="1", b="2"}`.
- `duration_to_prom_str(window)` renders durations the way Prometheus
  writes them (`30d`, `1h`, `5m`).
- `format_float(value)` formats numbers in the shortest `%g` style used in
  expressions.

SLI queries are templates. `slothgen.template` fills in the `{{.window}}`
placeholder for each window. A template with a malformed action raises
`slothgen.template.TemplateError`, and so does one that refers to an unknown
key.

## What it does not do

`slothgen` is a library only. It has no command-line tool and no
Kubernetes controller. It does not read SLO specification files (YAML,
Kubernetes resources or OpenSLO documents) and does not write rule files.
You build the `PromSLO` and `MWMBAlertGroup` objects yourself, and you
serialise the resulting `Rule` objects yourself. There is no SLO validation
step. Plugins cannot be loaded from source files at run time: only the core
plugins listed above are available.