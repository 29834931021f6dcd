"""
Per-candidate alert computation and fan-in into an AlertBatch.

Each candidate is independent: its velocity lookup, projection and supplier
resolution touch no shared mutable state, so they run on a bounded worker
pool. Results are written into a slot per candidate index and the batch is
rebuilt in original candidate order, whatever order the workers finish in.

Failure is all-or-nothing. The first failed lookup, or the request timeout,
cancels the lookups that have not started and fails the whole batch.
"""

import logging
import time
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Optional

from .config import DEFAULT_MAX_WORKERS, DEFAULT_TIMEOUT_SECONDS
from .exceptions import AlertTimeoutError
from .projector import classify_urgency
from .schemas import Alert, AlertBatch

logger = logging.getLogger(__name__)


class AlertAssembler:

    def __init__(
        self,
        estimator,
        projector,
        resolver,
        max_workers: int = DEFAULT_MAX_WORKERS,
        timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
    ):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.estimator = estimator
        self.projector = projector
        self.resolver = resolver
        self.max_workers = max_workers
        self.timeout = timeout

    def build_alert(self, position) -> Optional[Alert]:
        """Alert for one candidate, or None when it is not admitted."""
        velocity = self.estimator.estimate(position)
        projection = self.projector.project(position, velocity)

        if not projection.included:
            logger.debug(
                f"Skipping product {position.product_id} in warehouse "
                f"{position.warehouse_id} - no recent sales"
            )
            return None

        supplier = self.resolver.resolve(position)
        return Alert.from_position(
            position,
            projection,
            velocity,
            supplier,
            urgency=classify_urgency(projection.days_until_stockout, position.current_stock),
        )

    def assemble(self, positions) -> AlertBatch:
        positions = list(positions)

        if self.max_workers == 1:
            results = self._run_sequential(positions)
        else:
            results = self._run_parallel(positions)

        return AlertBatch(alerts=tuple(alert for alert in results if alert is not None))

    def _run_sequential(self, positions):
        deadline = None if self.timeout is None else time.monotonic() + self.timeout
        results = []
        for index, position in enumerate(positions):
            if deadline is not None and time.monotonic() > deadline:
                raise AlertTimeoutError(self.timeout, len(positions) - index)
            results.append(self.build_alert(position))
            if deadline is not None and time.monotonic() > deadline:
                raise AlertTimeoutError(self.timeout, len(positions) - index - 1)
        return results

    def _run_parallel(self, positions):
        results = [None] * len(positions)
        if not positions:
            return results

        executor = ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(positions)),
            thread_name_prefix="lowstock-alert",
        )
        try:
            futures = {
                executor.submit(self.build_alert, position): index
                for index, position in enumerate(positions)
            }
            done, pending = wait(futures, timeout=self.timeout, return_when=FIRST_EXCEPTION)

            for future in done:
                error = future.exception()
                if error is not None:
                    logger.warning(
                        f"Candidate {futures[future]} failed, aborting batch "
                        f"({len(pending)} lookups cancelled)"
                    )
                    raise error

            if pending:
                raise AlertTimeoutError(self.timeout, len(pending))

            for future in done:
                results[futures[future]] = future.result()
        finally:
            # Lookups already running finish in the background; their results are dropped.
            executor.shutdown(wait=False, cancel_futures=True)

        return results
