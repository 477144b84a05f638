"""Per-entity access pattern tracking."""

from collections.abc import Callable
from datetime import datetime, timedelta

from cortex_cache.entities import AccessRecord, FrequencyClass
from cortex_cache.models import AccessStats
from cortex_cache.utils import round_half_up, utcnow

FREQUENCY_THRESHOLDS = (
    (timedelta(hours=1), FrequencyClass.VERY_HIGH),
    (timedelta(hours=24), FrequencyClass.HIGH),
    (timedelta(hours=168), FrequencyClass.MEDIUM),
)


def classify_frequency(previous_access: datetime | None, now: datetime) -> FrequencyClass:
    """Bucket the time elapsed since the previous access."""
    if previous_access is None:
        return FrequencyClass.NEW

    elapsed = now - previous_access
    for threshold, frequency in FREQUENCY_THRESHOLDS:
        if elapsed < threshold:
            return frequency
    return FrequencyClass.LOW


class AccessTracker:
    """Records how often and how recently each entity name is looked up.

    Every logical read is recorded exactly once, including lookups of
    names that turn out not to exist.
    """

    def __init__(self, clock: Callable[[], datetime] = utcnow) -> None:
        self._clock = clock
        self._records: dict[str, AccessRecord] = {}

    def record(self, name: str) -> AccessRecord:
        """Record one access to ``name``.

        The frequency class is computed from the access before this one.

        Returns:
            The updated AccessRecord
        """
        now = self._clock()
        current = self._records.get(name)
        record = AccessRecord(
            count=(current.count if current else 0) + 1,
            last_access=now,
            frequency_class=classify_frequency(current.last_access if current else None, now),
        )
        self._records[name] = record
        return record

    def get(self, name: str) -> AccessRecord | None:
        return self._records.get(name)

    def stats(self) -> AccessStats:
        total = sum(record.count for record in self._records.values())
        unique = len(self._records)
        average = int(round_half_up(total / unique)) if unique else 0
        return AccessStats(total_accesses=total, unique_entities=unique, average_accesses=average)
