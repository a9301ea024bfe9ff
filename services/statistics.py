"""Descriptive statistics and outlier flagging over sensor readings."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from app.schemas import Measurement, Stats

OUTLIER_STDDEV_FACTOR = 2.0


@dataclass(frozen=True)
class StatsSummary:
    """Mean, population variance and the ``mean ± 2σ`` outlier band."""

    mean: float = 0.0
    variance: float = 0.0
    upper_threshold: float = 0.0
    lower_threshold: float = 0.0


def _usable_values(readings: Iterable[Optional[Measurement]]) -> List[float]:
    values: List[float] = []
    for reading in readings:
        if reading is None or reading.value is None or not math.isfinite(reading.value):
            continue
        values.append(reading.value)
    return values


def compute_stats(readings: Iterable[Optional[Measurement]]) -> StatsSummary:
    """Compute statistics, ignoring readings without a finite value.

    An empty set (after filtering) yields all-zero statistics.
    """
    values = _usable_values(readings)
    if not values:
        return StatsSummary()

    count = len(values)
    mean = sum(values) / count
    variance = sum((value - mean) ** 2 for value in values) / count
    stddev = math.sqrt(variance)
    return StatsSummary(
        mean=mean,
        variance=variance,
        upper_threshold=mean + OUTLIER_STDDEV_FACTOR * stddev,
        lower_threshold=mean - OUTLIER_STDDEV_FACTOR * stddev,
    )


def compute_stats_for_window(
    readings: Iterable[Optional[Measurement]],
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> Stats:
    summary = compute_stats(readings)
    return Stats(
        start_date=start_date,
        end_date=end_date,
        mean=summary.mean,
        variance=summary.variance,
        upper_threshold=summary.upper_threshold,
        lower_threshold=summary.lower_threshold,
    )


def _is_outlier(reading: Measurement, stats: Stats | StatsSummary) -> bool:
    if reading.value is None or not math.isfinite(reading.value):
        return False
    return reading.value > stats.upper_threshold or reading.value < stats.lower_threshold


def flag_outliers(
    readings: Optional[Sequence[Measurement]],
    stats: Stats | StatsSummary,
) -> List[Measurement]:
    """Return copies of ``readings`` with ``is_outlier`` set on every entry.

    The input readings are left untouched; callers use the returned list.
    """
    if not readings or not isinstance(readings, Sequence):
        return []
    return [
        reading.model_copy(update={"is_outlier": _is_outlier(reading, stats)})
        for reading in readings
    ]


def only_outliers(readings: Sequence[Measurement], stats: Stats | StatsSummary) -> List[Measurement]:
    return [reading for reading in flag_outliers(readings, stats) if reading.is_outlier]
