import math
import random

from pod_reaper.rules.base_rule import ReapRule


_INFINITY_SPELLINGS = ("inf", "infinity")


def parse_chance(value: str) -> float:
    # float() tolerates padding and digit separators, strconv.ParseFloat does not
    if value != value.strip() or "_" in value:
        raise ValueError(f"could not parse {value!r} as a number")
    chance = float(value)
    # out of range literals such as 1e400 overflow to inf
    if math.isinf(chance) and value.lstrip("+-").lower() not in _INFINITY_SPELLINGS:
        raise ValueError(f"{value!r} is out of range")
    return chance


class ChaosRule(ReapRule):
    """
    Reaps a pod with a fixed probability.

    The chance is not range checked: anything >= 1 (or +Inf) always reaps,
    anything <= 0 (or -Inf, NaN) never does.
    """

    name = "Chaos"
    config_key = "CHAOS_CHANCE"

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()
        self.chance = 0.0

    def parse(self, value):
        self.chance = parse_chance(value)

    def describe(self, value):
        return f"chaos chance {value}"

    def should_reap(self, pod):
        if self.rng.random() < self.chance:
            return True, "was flagged for chaos"
        return False, ""
