from datetime import datetime, timedelta, timezone

import pytest

from pod_reaper.errors import ConfigurationError
from pod_reaper.rules.duration_rules import MaxDurationRule, UnreadyRule

NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def clock():
    return NOW


def iso(moment):
    return moment.strftime("%Y-%m-%dT%H:%M:%SZ")


def started_pod(ago):
    return {"metadata": {"name": "p"}, "status": {"startTime": iso(NOW - ago)}}


def ready_pod(status, transitioned):
    return {
        "metadata": {"name": "p"},
        "status": {
            "conditions": [
                {"type": "Initialized", "status": "True"},
                {
                    "type": "Ready",
                    "status": status,
                    "reason": "ContainersNotReady",
                    "lastTransitionTime": transitioned,
                },
            ]
        },
    }


def loaded(rule_type, key, value):
    rule = rule_type(now=clock)
    rule.load({key: value})
    return rule


# ----------------------------
# Maximum run duration
# ----------------------------


def test_duration_load():
    rule = MaxDurationRule(now=clock)
    assert rule.load({"MAX_DURATION": "2m"}) == (True, "maximum run duration 2m")
    assert rule.limit == timedelta(minutes=2)


def test_duration_no_load():
    assert MaxDurationRule().load({}) == (False, "")


def test_duration_invalid():
    with pytest.raises(ConfigurationError):
        MaxDurationRule().load({"MAX_DURATION": "not-a-time"})


@pytest.mark.parametrize("rule_type, key", [(MaxDurationRule, "MAX_DURATION"), (UnreadyRule, "MAX_UNREADY")])
def test_duration_out_of_range(rule_type, key):
    with pytest.raises(ConfigurationError):
        rule_type().load({key: "99999999999h"})


def test_duration_reap():
    rule = loaded(MaxDurationRule, "MAX_DURATION", "1m59s")
    reap, reason = rule.should_reap(started_pod(timedelta(minutes=2)))
    assert reap
    assert reason == "has been running for 2m0s"


def test_duration_no_reap():
    rule = loaded(MaxDurationRule, "MAX_DURATION", "2m1s")
    assert rule.should_reap(started_pod(timedelta(minutes=2))) == (False, "")


def test_duration_equal_does_not_reap():
    rule = loaded(MaxDurationRule, "MAX_DURATION", "2m")
    assert rule.should_reap(started_pod(timedelta(minutes=2))) == (False, "")


def test_duration_no_start_time():
    rule = loaded(MaxDurationRule, "MAX_DURATION", "1s")
    assert rule.should_reap({"metadata": {"name": "p"}, "status": {}}) == (False, "")


@pytest.mark.parametrize("value", ["0", "0s", "-5m"])
def test_zero_or_negative_duration_reaps_started_pods(value):
    rule = loaded(MaxDurationRule, "MAX_DURATION", value)
    assert rule.should_reap(started_pod(timedelta(seconds=1)))[0] is True


def test_duration_accepts_datetime_start_time():
    rule = loaded(MaxDurationRule, "MAX_DURATION", "1h")
    pod = {"status": {"startTime": NOW - timedelta(hours=3)}}
    assert rule.should_reap(pod) == (True, "has been running for 3h0m0s")


# ----------------------------
# Maximum unready duration
# ----------------------------


def test_unready_load():
    rule = UnreadyRule()
    assert rule.load({"MAX_UNREADY": "30m"}) == (True, "maximum unready 30m")


def test_unready_invalid_time():
    with pytest.raises(ConfigurationError):
        UnreadyRule().load({"MAX_UNREADY": "not-a-time"})


def test_unready_no_load():
    assert UnreadyRule().load({}) == (False, "")


def test_unready_no_ready_condition():
    rule = loaded(UnreadyRule, "MAX_UNREADY", "10m")
    assert rule.should_reap({"status": {"conditions": []}}) == (False, "")
    assert rule.should_reap({"status": {}}) == (False, "")


def test_unready_reap():
    rule = loaded(UnreadyRule, "MAX_UNREADY", "9m59s")
    pod = ready_pod("False", iso(NOW - timedelta(minutes=10)))
    reap, reason = rule.should_reap(pod)
    assert reap
    assert reason == "has been unready for 10m0s"


def test_unready_no_reap():
    rule = loaded(UnreadyRule, "MAX_UNREADY", "10m1s")
    pod = ready_pod("False", iso(NOW - timedelta(minutes=10)))
    assert rule.should_reap(pod) == (False, "")


@pytest.mark.parametrize("transitioned", [None, "", "0001-01-01T00:00:00Z"])
def test_unset_transition_time_does_not_reap(transitioned):
    rule = loaded(UnreadyRule, "MAX_UNREADY", "1m")
    assert rule.should_reap(ready_pod("False", transitioned)) == (False, "")


@pytest.mark.parametrize("status", ["Unknown", "", "False", "true"])
def test_anything_but_true_is_unready(status):
    rule = loaded(UnreadyRule, "MAX_UNREADY", "1m")
    pod = ready_pod(status, iso(NOW - timedelta(minutes=10)))
    assert rule.should_reap(pod)[0] is True


def test_ready_true_does_not_reap():
    rule = loaded(UnreadyRule, "MAX_UNREADY", "1m")
    pod = ready_pod("True", iso(NOW - timedelta(minutes=10)))
    assert rule.should_reap(pod) == (False, "")
