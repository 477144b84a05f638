"""Read-side aggregation of every component's counters."""

from collections.abc import Callable
from datetime import datetime

from cortex_cache.models import HealthSnapshot
from cortex_cache.utils import round_half_up, utcnow

from .access_tracker import AccessTracker
from .backing_store_client import BackingStoreClient
from .lru_cache import LRUCache
from .reference_catalog import ReferenceCatalog

DEFAULT_AVG_ENTITY_BYTES = 5000


def derive_reduction(footprint_bytes: int, estimated_full_bytes: int) -> tuple[int, float]:
    """Memory reduction (percent) and compression ratio of catalog vs. full corpus.

    Both are 0 when either side is empty.
    """
    if footprint_bytes <= 0 or estimated_full_bytes <= 0:
        return 0, 0.0
    reduction = int(round_half_up((1 - footprint_bytes / estimated_full_bytes) * 100))
    ratio = round_half_up(estimated_full_bytes / footprint_bytes, 1)
    return reduction, ratio


class MetricsAggregator:
    """Builds HealthSnapshots from the components it is given.

    Never mutates anything; every figure is derived from the snapshots the
    components hand out.
    """

    def __init__(
        self,
        catalog: ReferenceCatalog,
        backing_store: BackingStoreClient,
        cache: LRUCache,
        access_tracker: AccessTracker,
        avg_entity_bytes: int = DEFAULT_AVG_ENTITY_BYTES,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._catalog = catalog
        self._backing_store = backing_store
        self._cache = cache
        self._access_tracker = access_tracker
        self._avg_entity_bytes = avg_entity_bytes
        self._clock = clock

    def snapshot(self) -> HealthSnapshot:
        catalog_size = self._catalog.size()
        estimated_full = catalog_size.reference_count * self._avg_entity_bytes
        reduction, ratio = derive_reduction(catalog_size.footprint_bytes, estimated_full)

        return HealthSnapshot(
            catalog=catalog_size,
            backing_store=self._backing_store.metrics(),
            cache=self._cache.stats(),
            access=self._access_tracker.stats(),
            estimated_full_bytes=estimated_full,
            memory_reduction_percent=reduction,
            compression_ratio=ratio,
            timestamp=self._clock(),
        )
