"""Time segmentation of a call across standard and reduced rate periods."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime, timedelta

from cdrrate.core.config.settings import PeriodConfig
from cdrrate.core.exceptions.base import ConfigurationError
from cdrrate.core.models.call import RatePeriod, Segment, Segmentation

DEFAULT_WEEKEND = frozenset({5, 6})

_ONE_HOUR = timedelta(hours=1)


@dataclass(frozen=True)
class RatePeriodPolicy:
    """Classifies wall-clock instants into standard or reduced rate.

    Every instant on a ``weekend_days`` weekday is reduced. On other days the
    hours from ``reduced_start_hour`` (inclusive) to ``reduced_end_hour``
    (exclusive) are reduced; the window wraps past midnight when the start
    hour is later than the end hour. Equal hours mean no reduced window.
    """

    name: str
    reduced_start_hour: int
    reduced_end_hour: int
    weekend_days: frozenset[int] = DEFAULT_WEEKEND

    def __post_init__(self) -> None:
        if not (0 <= self.reduced_start_hour <= 23 and 0 <= self.reduced_end_hour <= 23):
            raise ConfigurationError("Reduced window hours must be within 0-23", setting="periods")

    def is_reduced_hour(self, hour: int) -> bool:
        start, end = self.reduced_start_hour, self.reduced_end_hour
        if start < end:
            return start <= hour < end
        if start > end:
            return hour >= start or hour < end
        return False

    def classify(self, instant: datetime) -> RatePeriod:
        if instant.weekday() in self.weekend_days or self.is_reduced_hour(instant.hour):
            return RatePeriod.REDUCED
        return RatePeriod.STANDARD

    def next_transition(self, instant: datetime) -> datetime:
        """Return the next point where the classification may change (next clock hour)."""

        return instant.replace(minute=0, second=0, microsecond=0) + _ONE_HOUR


def evening_weekend_policy() -> RatePeriodPolicy:
    """Weekends reduced all day; weekdays reduced 19:00-07:00."""

    return RatePeriodPolicy(name="evening-weekend", reduced_start_hour=19, reduced_end_hour=7)


def night_window_policy() -> RatePeriodPolicy:
    """Reduced 00:00-07:59 every day, no weekend rule."""

    return RatePeriodPolicy(name="night-window", reduced_start_hour=0, reduced_end_hour=8, weekend_days=frozenset())


_PRESETS = {
    "evening-weekend": evening_weekend_policy,
    "night-window": night_window_policy,
}


def policy_from_config(config: PeriodConfig) -> RatePeriodPolicy:
    """Build a policy from the named preset plus any explicit overrides."""

    try:
        base = _PRESETS[config.policy]()
    except KeyError as exc:
        raise ConfigurationError(f"Unknown rate period policy '{config.policy}'", setting="periods.policy") from exc

    return RatePeriodPolicy(
        name=base.name,
        reduced_start_hour=base.reduced_start_hour if config.reduced_start_hour is None else config.reduced_start_hour,
        reduced_end_hour=base.reduced_end_hour if config.reduced_end_hour is None else config.reduced_end_hour,
        weekend_days=base.weekend_days if config.weekend_days is None else frozenset(config.weekend_days),
    )


def iter_segments(answer_time: datetime, end_time: datetime, policy: RatePeriodPolicy) -> Iterator[Segment]:
    """Yield contiguous segments covering ``[answer_time, end_time)``.

    Each segment ends at the next policy transition or at ``end_time`` and is
    classified by its start instant. Nothing is yielded when ``end_time`` is
    not after ``answer_time``.
    """
    cursor = answer_time
    while cursor < end_time:
        boundary = min(policy.next_transition(cursor), end_time)
        yield Segment(start=cursor, end=boundary, period=policy.classify(cursor))
        cursor = boundary


def split(answer_time: datetime, end_time: datetime, policy: RatePeriodPolicy | None = None) -> Segmentation:
    """Split a call into standard and reduced seconds.

    ``standard_seconds + reduced_seconds`` always equals the call length in
    whole seconds, for any number of hours or days spanned.
    """
    policy = policy or evening_weekend_policy()
    standard = 0
    reduced = 0
    for segment in iter_segments(answer_time, end_time, policy):
        if segment.period is RatePeriod.REDUCED:
            reduced += segment.seconds
        else:
            standard += segment.seconds
    return Segmentation(standard_seconds=standard, reduced_seconds=reduced)


__all__ = [
    "RatePeriodPolicy",
    "DEFAULT_WEEKEND",
    "evening_weekend_policy",
    "iter_segments",
    "night_window_policy",
    "policy_from_config",
    "split",
]
