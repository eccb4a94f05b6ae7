# runnerfleet

Building blocks for keeping a fleet of self-hosted CI runners at the size you
ask for. The package holds the decision logic that turns a runner deployment
into runner replica sets and runners, schedule matching for one-time and
recurring scaling windows, stable template hashing, and `requests` adapters
that record rate-limit figures and log HTTP round trips.

## Installation

```
pip install runnerfleet
```

The `test` extra pulls in pytest for the test suite:

```
pip install "runnerfleet[test]"
```

## Modules

- `runnerfleet.hashing`: `fnv32a` (32-bit FNV-1a), `deep_format` (a stable
  text rendering of nested objects, with sorted mapping keys and dataclass
  fields), `deep_hash_object`, `fnv_hash_string_objects`, and
  `safe_encode_string`, which maps text onto an alphabet without vowels so
  that hashes never spell words.
- `runnerfleet.labels`: `LabelSelector` and `LabelSelectorRequirement`,
  plus `clone_and_add_label`, `clone_selector_and_add_label`,
  `filter_labels` and `get_int_or_default`. The cloning helpers leave their
  inputs untouched and return the input itself when the key is empty.
- `runnerfleet.schedule`: `match_schedule(now, start_time, end_time,
  recurrence_rule)` returns the `Period` active at `now` and the next one to
  come (either may be `None`). A `RecurrenceRule` has a `frequency` of `""`
  (one time), `"Daily"`, `"Weekly"`, `"Monthly"` or `"Yearly"`, and an
  optional `until_time`. An unknown frequency, or a window longer than its
  frequency, raises `ScheduleError`, a `ValueError`.
- `runnerfleet.logsetup`: `resolve_level` turns `debug`, `info`, `warn`,
  `error` or a signed number (-1 debug, 0 info, 1 warn, 2 error, below -1
  ever more verbose) into a `logging` level; `new_logger(log_level, name)`
  configures a stderr logger with RFC 3339 timestamps. Unparsable levels
  raise `ValueError`.
- `runnerfleet.transports`: `MetricsAdapter` updates the `RATE_LIMIT` and
  `RATE_LIMIT_REMAINING` `Gauge` values from the `X-RateLimit-Limit` and
  `X-RateLimit-Remaining` headers of every response; `LoggingAdapter`
  logs each round trip at trace levels, with the key/value pairs in a
  `fields` attribute of the log record. Both wrap another adapter, an
  `HTTPAdapter` by default. `parse_response` and `log_round_trip` do the
  same work for a single response.
- `runnerfleet.models`: dataclasses for `Runner`, `RunnerReplicaSet`,
  `RunnerDeployment` and their specs, statuses and `ObjectMeta`, plus
  `set_controller_reference` and `get_controller_of`.
- `runnerfleet.deployment`: `new_runner_replica_set` builds the replica set
  a deployment asks for, labelled with its template hash (`compute_hash`);
  `RunnerDeploymentReconciler.reconcile(namespace, name)` creates a new
  replica set when the template changes, updates selectors and replica
  counts in place, scales old replica sets to zero and deletes them once the
  newest one is fully ready, and writes the deployment's status. It returns
  a `Result` telling whether and when to run again.
- `runnerfleet.replicaset`: `ensure_template_hash` adds a computed template
  hash to a replica set that lacks one, `new_runner` builds a runner from a
  replica set's template with a `sync-time` annotation, and
  `registration_only_runner_name_for` names the registration-only runner.
- `runnerfleet.fakegithub`: `RunnersList`, an in-memory list of
  `GitHubRunner` entries unique by name, with `sync`, `add_offline`,
  `remove` and `list_payload`. `serve()` starts a local HTTP server for the
  repository and organisation runner list and removal endpoints; the
  returned object has a `url` and is closed with `close()` or a `with`
  block.

## Example

```python
from datetime import datetime, timezone

from runnerfleet.schedule import RecurrenceRule, match_schedule

start = datetime(2021, 5, 1, tzinfo=timezone.utc)
end = datetime(2021, 5, 3, tzinfo=timezone.utc)
now = datetime(2021, 5, 8, tzinfo=timezone.utc)

active, upcoming = match_schedule(now, start, end, RecurrenceRule(frequency="Weekly"))
print(active)    # 2021-05-08T00:00:00Z-2021-05-10T00:00:00Z
print(upcoming)  # 2021-05-15T00:00:00Z-2021-05-17T00:00:00Z
```

## What it does not do

- It does not talk to a cluster. `RunnerDeploymentReconciler` works through
  a client object you supply, with `get`, `list_replica_sets`, `create`,
  `update`, `delete` and `update_status` methods; storage, watching and
  scheduling of reconciliations are up to you.
- There is no reconciler for replica sets, runner pods or stateful sets;
  only the helpers in `runnerfleet.replicaset` are provided.
- The gauges only hold their last value; nothing exports them.
- There is no command-line program or long-running service.