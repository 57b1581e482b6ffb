"""Public API and orchestration for ``finance_summary``.

- :func:`compute_summary` is the pure engine: records in, highlight cards and
  formatted list out. It never touches storage.
- :func:`load_summary` wraps it with one storage read for a user.
- :class:`SummaryRefresher` re-runs :func:`load_summary` on every refresh
  signal (first activation, each return to the foreground) and publishes only
  the newest run's result.
"""

from __future__ import annotations

from collections.abc import Iterable

from .aggregator import aggregate
from .config import SummaryConfig
from .loader import load_records
from .logging_setup import get_logger
from .models import DashboardSummary, TransactionRecord, UserIdentity
from .presenter import present_highlights, present_records
from .storage import KeyValueStore

_logger = get_logger(__name__)


def compute_summary(
    records: Iterable[TransactionRecord],
    config: SummaryConfig | None = None,
    *,
    user: UserIdentity | None = None,
    skipped_records: int = 0,
) -> DashboardSummary:
    """Aggregate and format ``records`` into a :class:`DashboardSummary`.

    The transaction list keeps the input order; nothing is sorted. Running it
    twice on the same records yields equal output.
    """

    config = config or SummaryConfig()
    seq = list(records)
    result = aggregate(seq, tz=config.tzinfo)
    return DashboardSummary(
        highlights=present_highlights(result, config),
        transactions=present_records(seq, config),
        user=user,
        skipped_records=skipped_records,
    )


async def load_summary(
    store: KeyValueStore,
    identity: UserIdentity | str,
    config: SummaryConfig | None = None,
) -> DashboardSummary:
    """Load the stored records for ``identity`` and compute their summary.

    A missing key produces the all-zero summary. Malformed payloads and, under
    the default policy, invalid records propagate; no partial summary is built.
    """

    config = config or SummaryConfig()
    user = identity if isinstance(identity, UserIdentity) else UserIdentity(id=identity)
    parsed = await load_records(store, user, config)
    return compute_summary(parsed.records, config, user=user, skipped_records=parsed.skipped)


class SummaryRefresher:
    """Publishes the summary of the most recently *started* load.

    Every :meth:`refresh` call takes a new generation number. A run that
    finishes after a newer one has started is discarded rather than
    overwriting :attr:`latest`, and so is its failure. Failures of the current
    run propagate to the caller and leave :attr:`latest` as it was.
    """

    def __init__(
        self,
        store: KeyValueStore,
        identity: UserIdentity | str,
        config: SummaryConfig | None = None,
    ) -> None:
        self.store = store
        self.identity = identity
        self.config = config or SummaryConfig()
        self.latest: DashboardSummary | None = None
        self._generation = 0
        self._in_flight: int | None = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_loading(self) -> bool:
        return self._in_flight is not None

    async def refresh(self) -> DashboardSummary | None:
        """Run one load cycle.

        Returns the published summary, or ``None`` when the run was superseded
        by a newer refresh before it completed.
        """

        self._generation += 1
        generation = self._generation
        self._in_flight = generation
        try:
            summary = await load_summary(self.store, self.identity, self.config)
        except Exception:
            if generation == self._generation:
                raise
            _logger.debug(
                "discarding failure of stale refresh (generation %d, current %d)",
                generation,
                self._generation,
                exc_info=True,
            )
            return None
        finally:
            if self._in_flight == generation:
                self._in_flight = None

        if generation != self._generation:
            _logger.debug(
                "discarding stale summary (generation %d, current %d)",
                generation,
                self._generation,
            )
            return None
        self.latest = summary
        return summary


__all__ = ["SummaryRefresher", "compute_summary", "load_summary"]
