"""
SequenceService -- monotonic sequence allocation via locked counter rows.

Responsibility:
    Provides strictly increasing sequence numbers for voucher and
    settlement numbering.  Uses a dedicated counter table with row-level
    locking (``SELECT ... FOR UPDATE``) so two concurrent creates never
    receive the same number.

Architecture position:
    Kernel > Services.  ``DocumentNumbering`` formats the raw values into
    ``LCV-0001`` / ``SETTLE-2025-00001`` and is the default
    VoucherNumbering implementation.

Invariants enforced:
    - The locked counter row is the sole source of truth for the next
      value.  MAX(number)+1 is never used.
    - The increment is only visible after the caller's transaction
      commits.  Rollback returns the value.

Failure modes:
    - IntegrityError: concurrent counter creation race (handled via
      savepoint rollback and retry).
"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from landed_kernel.logging_config import get_logger
from landed_kernel.models.sequence import SequenceCounter

logger = get_logger("services.sequence")


class SequenceService:
    """
    Service for generating transactional sequence numbers.

    Non-goals:
        - Does NOT call ``session.commit()`` -- caller controls boundaries.

    Usage:
        seq = sequence_service.next_value("landed_cost_voucher")
    """

    VOUCHER = "landed_cost_voucher"
    SETTLEMENT = "party_settlement"

    def __init__(self, session: Session):
        self._session = session

    def _locked_counter(self, sequence_name: str) -> SequenceCounter | None:
        return self._session.execute(
            select(SequenceCounter)
            .where(SequenceCounter.name == sequence_name)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def next_value(self, sequence_name: str) -> int:
        """
        Get the next value for a named sequence.

        Locks the sequence row (or creates it on first use), increments the
        counter and returns the new value.

        Returns:
            The next sequence value (always > 0).
        """
        counter = self._locked_counter(sequence_name)

        if counter is None:
            # First use.  Another transaction may create the row at the same
            # time, so the insert runs in a savepoint.
            savepoint = self._session.begin_nested()
            try:
                counter = SequenceCounter(name=sequence_name, current_value=1)
                self._session.add(counter)
                self._session.flush()
                savepoint.commit()
                logger.debug(
                    "sequence_allocated",
                    extra={"sequence_name": sequence_name, "value": 1},
                )
                return 1
            except IntegrityError:
                logger.debug(
                    "sequence_counter_race_retry",
                    extra={"sequence_name": sequence_name},
                )
                savepoint.rollback()
                counter = self._locked_counter(sequence_name)
                if counter is None:
                    raise

        counter.current_value += 1
        self._session.flush()
        logger.debug(
            "sequence_allocated",
            extra={"sequence_name": sequence_name, "value": counter.current_value},
        )
        return counter.current_value

    def current_value(self, sequence_name: str) -> int:
        """Current value of a sequence without incrementing (0 if unused)."""
        counter = self._session.execute(
            select(SequenceCounter).where(SequenceCounter.name == sequence_name)
        ).scalar_one_or_none()
        return counter.current_value if counter else 0

    def reset(self, sequence_name: str, value: int = 0) -> None:
        """
        Reset a sequence to a specific value.

        WARNING: only for tests and data migrations.
        """
        counter = self._locked_counter(sequence_name)
        if counter is None:
            self._session.add(SequenceCounter(name=sequence_name, current_value=value))
        else:
            counter.current_value = value
        self._session.flush()


class DocumentNumbering:
    """
    Voucher and settlement number formatting on top of SequenceService.

    Voucher numbers share one counter (``LCV-0001``); settlement numbers
    restart every calendar year (``SETTLE-2025-00001``).
    """

    def __init__(
        self,
        session: Session,
        voucher_prefix: str = "LCV",
        voucher_width: int = 4,
        settlement_prefix: str = "SETTLE",
        settlement_width: int = 5,
    ):
        self._sequences = SequenceService(session)
        self._voucher_prefix = voucher_prefix
        self._voucher_width = voucher_width
        self._settlement_prefix = settlement_prefix
        self._settlement_width = settlement_width

    def _format_voucher(self, value: int) -> str:
        return f"{self._voucher_prefix}-{value:0{self._voucher_width}d}"

    def next_voucher_number(self) -> str:
        return self._format_voucher(
            self._sequences.next_value(SequenceService.VOUCHER)
        )

    def peek_voucher_number(self) -> str:
        """The number the next create would receive.  Consumes nothing."""
        return self._format_voucher(
            self._sequences.current_value(SequenceService.VOUCHER) + 1
        )

    def next_settlement_number(self, year: int) -> str:
        value = self._sequences.next_value(f"{SequenceService.SETTLEMENT}:{year}")
        return f"{self._settlement_prefix}-{year}-{value:0{self._settlement_width}d}"
