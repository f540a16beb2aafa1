"""
Metric identifiers and their accessors.

Energy and mood are two-sided (a highest and a lowest reading per day);
anxiety and irritability are one-sided. Every read goes through these
accessors so a missing or out-of-range value becomes the baseline 4.
"""

from enum import Enum
from typing import Callable

from analytics.models import DailyEntry, scale_value


class Metric(str, Enum):
    ENERGY = "energy"
    MOOD = "mood"
    ANXIETY = "anxiety"
    IRRITABILITY = "irritability"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def two_sided(self) -> bool:
        return self in (Metric.ENERGY, Metric.MOOD)

    @property
    def lower_is_better(self) -> bool:
        return self in (Metric.ANXIETY, Metric.IRRITABILITY)


Accessor = Callable[[DailyEntry], float]

# Headline value of each metric: the day's highest for two-sided metrics
HEADLINE: dict[Metric, Accessor] = {
    Metric.ENERGY: lambda e: scale_value(e.energy.highest),
    Metric.MOOD: lambda e: scale_value(e.mood.highest),
    Metric.ANXIETY: lambda e: scale_value(e.anxiety),
    Metric.IRRITABILITY: lambda e: scale_value(e.irritability),
}

LOWEST: dict[Metric, Accessor] = {
    Metric.ENERGY: lambda e: scale_value(e.energy.lowest),
    Metric.MOOD: lambda e: scale_value(e.mood.lowest),
}


def metric_value(entry: DailyEntry, metric: Metric, side: str = "highest") -> float:
    """
    Read one metric from an entry.

    Args:
        entry: The entry to read
        metric: Which metric
        side: "highest" or "lowest"; only two-sided metrics accept "lowest"

    Raises:
        ValueError: For an unknown side, or "lowest" on a one-sided metric
    """
    metric = Metric(metric)
    if side == "highest":
        return HEADLINE[metric](entry)
    if side == "lowest":
        if not metric.two_sided:
            raise ValueError(f"{metric.value} has no lowest reading")
        return LOWEST[metric](entry)
    raise ValueError(f"Unknown side {side!r}")


def metric_values(entries, metric: Metric, side: str = "highest") -> list[float]:
    return [metric_value(entry, metric, side) for entry in entries]
