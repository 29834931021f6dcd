"""
Public entry point of the low-stock alert pipeline.

    VALIDATING -> FETCHING_CANDIDATES -> EMPTY -> DONE
                                      -> PROCESSING_EACH -> DONE
    any state -> FAILED

Validation failures never touch the store. Repository failures at any later
step fail the whole request; there is no partial batch.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .assembler import AlertAssembler
from .exceptions import ClientInputError, LowStockAlertError, RepositoryError
from .projector import StockoutProjector
from .repository import SqlInventoryRepository
from .schemas import AlertBatch
from .suppliers import SupplierResolver
from .velocity import VelocityEstimator

logger = logging.getLogger(__name__)

# Largest id a BIGINT column can hold.
MAX_COMPANY_ID = 2**63 - 1


class AlertState(enum.Enum):
    VALIDATING = "validating"
    FETCHING_CANDIDATES = "fetching_candidates"
    EMPTY = "empty"
    PROCESSING_EACH = "processing_each"
    DONE = "done"
    FAILED = "failed"


@dataclass
class AlertRun:
    """State of a single alert request. Never shared between requests."""

    raw_company_id: object
    company_id: Optional[int] = None
    state: AlertState = AlertState.VALIDATING
    history: List[AlertState] = field(default_factory=lambda: [AlertState.VALIDATING])
    candidate_count: int = 0
    batch: Optional[AlertBatch] = None
    error: Optional[LowStockAlertError] = None

    def transition(self, state):
        logger.debug(f"Alert request {self.raw_company_id!r}: {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    def fail(self, error):
        self.error = error
        self.transition(AlertState.FAILED)


def parse_company_id(raw) -> int:
    """Company id as a positive integer, or ClientInputError."""
    if isinstance(raw, bool):
        raise ClientInputError("Company id must be a positive integer", value=raw)

    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str):
        text = raw.strip()
        if not (text.isascii() and text.isdigit()):
            raise ClientInputError(f"Invalid company id: {raw!r}", value=raw)
        value = int(text)
    else:
        raise ClientInputError("Company id must be a positive integer", value=raw)

    if value <= 0:
        raise ClientInputError("Company id must be a positive integer", value=raw)
    if value > MAX_COMPANY_ID:
        raise ClientInputError(f"Company id out of range: {raw!r}", value=raw)
    return value


class AlertService:

    def __init__(self, repository, assembler):
        self.repository = repository
        self.assembler = assembler

    @classmethod
    def from_settings(cls, session_factory, settings):
        """Wire the SQL repository and pipeline stages from Settings."""
        repository = SqlInventoryRepository(
            session_factory, sale_kind=settings.sale_transaction_kind
        )
        assembler = AlertAssembler(
            estimator=VelocityEstimator(repository, window_days=settings.sales_window_days),
            projector=StockoutProjector(),
            resolver=SupplierResolver(),
            max_workers=settings.max_workers,
            timeout=settings.timeout_seconds,
        )
        return cls(repository, assembler)

    def run(self, raw_company_id) -> AlertRun:
        """Drive one request through the state machine. Does not raise for
        client or repository errors; they are recorded on the returned run."""
        run = AlertRun(raw_company_id=raw_company_id)

        try:
            run.company_id = parse_company_id(raw_company_id)
        except ClientInputError as exc:
            logger.info(f"Rejected low stock request: {exc.message}")
            run.fail(exc)
            return run

        try:
            run.transition(AlertState.FETCHING_CANDIDATES)
            positions = self.repository.fetch_low_stock_positions(run.company_id)
            run.candidate_count = len(positions)
            logger.info(f"Found {run.candidate_count} potential low stock items for company {run.company_id}")

            if not positions:
                run.transition(AlertState.EMPTY)
                run.batch = AlertBatch()
                run.transition(AlertState.DONE)
                return run

            run.transition(AlertState.PROCESSING_EACH)
            run.batch = self.assembler.assemble(positions)
        except RepositoryError as exc:
            logger.debug(f"Low stock alerts failed for company {run.company_id}: {exc}")
            run.fail(exc)
            return run

        run.transition(AlertState.DONE)
        logger.info(f"Returning {run.batch.total_alerts} low stock alerts for company {run.company_id}")
        return run

    def get_low_stock_alerts(self, raw_company_id) -> AlertBatch:
        run = self.run(raw_company_id)
        if run.error is not None:
            raise run.error
        return run.batch
