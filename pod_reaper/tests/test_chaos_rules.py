import math
import random

import pytest

from pod_reaper.errors import ConfigurationError
from pod_reaper.rules.chaos_rules import ChaosRule


class FixedRandom(random.Random):
    def __init__(self, value):
        super().__init__()
        self.value = value

    def random(self):
        return self.value


# ----------------------------
# load()
# ----------------------------


def test_load():
    rule = ChaosRule()
    loaded, message = rule.load({"CHAOS_CHANCE": "0.5"})
    assert loaded is True
    assert message == "chaos chance 0.5"
    assert rule.chance == 0.5


def test_no_load():
    assert ChaosRule().load({}) == (False, "")


def test_invalid_chance():
    with pytest.raises(ConfigurationError):
        ChaosRule().load({"CHAOS_CHANCE": "not-a-number"})


def test_whitespace_causes_parse_error():
    with pytest.raises(ConfigurationError):
        ChaosRule().load({"CHAOS_CHANCE": " 0.5 "})


@pytest.mark.parametrize("value, expected", [("-0.5", -0.5), ("2.0", 2.0)])
def test_out_of_range_chance_loads(value, expected):
    rule = ChaosRule()
    loaded, message = rule.load({"CHAOS_CHANCE": value})
    assert loaded
    assert message == f"chaos chance {value}"
    assert rule.chance == expected


def test_special_values_load():
    rule = ChaosRule()
    rule.load({"CHAOS_CHANCE": "NaN"})
    assert math.isnan(rule.chance)
    rule.load({"CHAOS_CHANCE": "+Inf"})
    assert rule.chance == math.inf
    rule.load({"CHAOS_CHANCE": "-Inf"})
    assert rule.chance == -math.inf
    rule.load({"CHAOS_CHANCE": "Infinity"})
    assert rule.chance == math.inf


@pytest.mark.parametrize("value", ["1e400", "-1e400"])
def test_overflowing_chance(value):
    with pytest.raises(ConfigurationError):
        ChaosRule().load({"CHAOS_CHANCE": value})


# ----------------------------
# should_reap()
# ----------------------------


def _reaps(chance, trials=200):
    rule = ChaosRule(rng=random.Random(1234))
    rule.chance = chance
    return [rule.should_reap({})[0] for _ in range(trials)]


def test_reap():
    rule = ChaosRule()
    rule.load({"CHAOS_CHANCE": "1.0"})
    assert rule.should_reap({}) == (True, "was flagged for chaos")


def test_no_reap():
    rule = ChaosRule()
    rule.load({"CHAOS_CHANCE": "0.0"})
    assert rule.should_reap({}) == (False, "")


@pytest.mark.parametrize("chance", [1.0, 2.0, math.inf])
def test_always_reaps(chance):
    assert all(_reaps(chance))


@pytest.mark.parametrize("chance", [0.0, -0.5, math.nan, -math.inf])
def test_never_reaps(chance):
    assert not any(_reaps(chance))


def test_draw_compared_strictly():
    rule = ChaosRule(rng=FixedRandom(0.25))
    rule.chance = 0.25
    assert rule.should_reap({})[0] is False
    rule.chance = 0.26
    assert rule.should_reap({})[0] is True


def test_partial_chance_reaps_some():
    results = _reaps(0.5, trials=500)
    assert 0 < sum(results) < 500
