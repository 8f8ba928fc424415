"""Busy-ness aggregation over a window of occupancy snapshots.

Pure functions: no I/O, no metrics, and no exceptions on well-typed input.
The result never depends on the order of the input snapshots, so snapshots
ingested out of order or concurrently can be aggregated as they come.

Buckets use the venue's local time: hour 0-23 and day of week 0-6 with
0=Sunday (the mobile client's convention).
"""
import math
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Iterable, Optional

import pytz

from app.models import (
    AggregateSummary,
    BusyAggregates,
    CurrentBusyness,
    DailyAggregate,
    HourlyAggregate,
    OccupancySnapshot,
    classify_status,
)

HOURS_PER_DAY = 24
DAYS_PER_WEEK = 7

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


@dataclass
class _Bucket:
    """Accumulates percentages for one hour or day bucket."""
    values: list[float] = field(default_factory=list)
    peak: float = 0.0

    def add(self, percentage: float) -> None:
        self.values.append(percentage)
        self.peak = max(self.peak, percentage)

    @property
    def count(self) -> int:
        return len(self.values)

    def mean(self) -> float:
        # fsum is exactly rounded, so the mean is independent of input order
        if not self.values:
            return 0.0
        return math.fsum(self.values) / len(self.values)


def local_hour_and_day(timestamp: datetime, tz: tzinfo) -> tuple[int, int]:
    """Return (hour 0-23, day of week 0=Sunday) of a timestamp in tz."""
    local = timestamp.astimezone(tz)
    return local.hour, (local.weekday() + 1) % DAYS_PER_WEEK


def _arg_max_hour(means: list[float]) -> int:
    """Hour with the highest mean; ties go to the earliest hour."""
    best = 0
    for hour, value in enumerate(means):
        if value > means[best]:
            best = hour
    return best


def aggregate(
    snapshots: Iterable[OccupancySnapshot],
    tz: Optional[tzinfo] = None,
    per_day_peak: bool = False,
) -> BusyAggregates:
    """Reduce a window of snapshots to hourly, daily and summary aggregates.

    Always returns 24 hourly and 7 daily entries; buckets without
    observations are zero-filled.

    By default every daily entry carries the same peak hour: the arg-max of
    the global hourly averages. With ``per_day_peak=True`` a day with
    observations carries the arg-max hour of its own snapshots instead (days
    without observations keep the global peak hour).

    Args:
        snapshots: Snapshots in the window, in any order
        tz: Venue timezone used for bucketing (default UTC)
        per_day_peak: Compute the peak hour per day instead of globally

    Returns:
        BusyAggregates with hourly, daily and summary data
    """
    tz = tz or pytz.UTC

    hourly = [_Bucket() for _ in range(HOURS_PER_DAY)]
    daily = [_Bucket() for _ in range(DAYS_PER_WEEK)]
    daily_hourly = [
        [_Bucket() for _ in range(HOURS_PER_DAY)] for _ in range(DAYS_PER_WEEK)
    ]
    overall = _Bucket()
    total_visitors = 0

    for snapshot in snapshots:
        hour, day = local_hour_and_day(snapshot.timestamp, tz)
        pct = snapshot.occupancy_percentage

        hourly[hour].add(pct)
        daily[day].add(pct)
        daily_hourly[day][hour].add(pct)
        overall.add(pct)
        total_visitors += snapshot.occupancy_count

    hourly_aggregates = [
        HourlyAggregate(
            hour=hour,
            average_occupancy=bucket.mean(),
            peak_occupancy=bucket.peak,
            sample_count=bucket.count,
        )
        for hour, bucket in enumerate(hourly)
    ]

    global_peak_hour = _arg_max_hour([h.average_occupancy for h in hourly_aggregates])

    daily_aggregates = []
    for day, bucket in enumerate(daily):
        peak_hour = global_peak_hour
        if per_day_peak and bucket.count:
            peak_hour = _arg_max_hour([b.mean() for b in daily_hourly[day]])
        daily_aggregates.append(
            DailyAggregate(
                day_of_week=day,
                average_occupancy=bucket.mean(),
                peak_hour=peak_hour,
                sample_count=bucket.count,
            )
        )

    return BusyAggregates(
        hourly_aggregates=hourly_aggregates,
        daily_aggregates=daily_aggregates,
        summary=AggregateSummary(
            total_visitors=total_visitors,
            average_occupancy=overall.mean(),
            snapshot_count=overall.count,
        ),
    )


def peak_hours(aggregates: BusyAggregates, limit: int = 3) -> list[str]:
    """Top observed hours by average occupancy, formatted like "21:00"."""
    observed = [h for h in aggregates.hourly_aggregates if h.sample_count > 0]
    observed.sort(key=lambda h: (-h.average_occupancy, h.hour))
    return [f"{h.hour}:00" for h in observed[:limit]]


def popular_days(aggregates: BusyAggregates, limit: int = 2) -> list[str]:
    """Top observed days of the week by average occupancy."""
    observed = [d for d in aggregates.daily_aggregates if d.sample_count > 0]
    observed.sort(key=lambda d: (-d.average_occupancy, d.day_of_week))
    return [DAY_NAMES[d.day_of_week] for d in observed[:limit]]


def current_busyness(snapshots: Iterable[OccupancySnapshot]) -> CurrentBusyness:
    """Classify the most recent snapshot of a window.

    Equal timestamps are broken by percentage then count so the choice does
    not depend on input order. An empty window is UNKNOWN with 0 occupancy.
    """
    latest = max(
        snapshots,
        key=lambda s: (s.timestamp, s.occupancy_percentage, s.occupancy_count),
        default=None,
    )
    if latest is None:
        return CurrentBusyness()

    return CurrentBusyness(
        current_status=latest.status or classify_status(latest.occupancy_percentage),
        current_occupancy=latest.occupancy_count,
        occupancy_percentage=latest.occupancy_percentage,
    )
