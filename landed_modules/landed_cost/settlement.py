"""
Party Settlement Service (``landed_modules.landed_cost.settlement``).

Responsibility
--------------
Batches the pending dues of one counter-party for one payable category
into a single settlement, then finalizes it with one consolidated payment
that flips every snapshotted voucher's payable to ``paid``.

Architecture position
---------------------
**Modules layer** -- ``SettlementService`` is the sole public entry point
for settlements.  It reads vouchers through the landed-cost ORM and drives
their payables through ``PayableStateMachine``.

Invariants enforced
-------------------
* The voucher set and each voucher's amount are fixed when the settlement
  is created.  Finalize never re-scans for newly pending vouchers and never
  recomputes amounts.
* A settlement is finalized at most once (compare-and-set on ``status``).
* Each voucher is flipped inside its own savepoint.  A voucher that can no
  longer be flipped is logged and skipped; the rest still go through.

Failure modes
-------------
* ``ValidationError`` -- bad period, empty or duplicate voucher ids, party
  type / category mismatch, voucher owned by another party, blank account.
* ``VoucherNotFoundError`` / ``SettlementNotFoundError`` -- unknown ids.
* ``InvalidStateError`` -- voucher not pending at creation; settlement
  already finalized.
* ``ConflictError`` -- voucher already held by another pending settlement
  of the same kind.

Usage::

    service = SettlementService(session, clock=clock)
    dues = service.pending_dues(SettlementPartyType.PARTNER)
    settlement = service.create_settlement(
        SettlementPartyType.PARTNER, dues[0].party_id,
        [p.voucher_id for p in dues[0].vouchers], "2025-01", actor_id,
    )
    result = service.finalize_settlement(settlement.id, "BANK-01", actor_id)
    result.skipped_voucher_ids  # () when every voucher was applied
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from landed_config import get_active_config
from landed_config.schema import LandedCostConfig
from landed_kernel.db.types import ZERO, format_money
from landed_kernel.domain.clock import Clock, SystemClock
from landed_kernel.domain.directories import PartyDirectory, PaymentSink, VoucherNumbering
from landed_kernel.domain.dtos import PaymentRequest
from landed_kernel.exceptions import (
    ConflictError,
    InvalidStateError,
    LandedCostError,
    PartyNotFoundError,
    SettlementNotFoundError,
    ValidationError,
    VoucherNotFoundError,
)
from landed_kernel.logging_config import LogContext, get_logger
from landed_kernel.services.party_service import PartyService
from landed_kernel.services.payment_service import PaymentService
from landed_kernel.services.sequence_service import DocumentNumbering
from landed_modules.landed_cost.models import (
    FinalizeResult,
    PartyDues,
    PayableCategory,
    PayableStatus,
    Settlement,
    SettlementPartyType,
    SettlementStatus,
)
from landed_modules.landed_cost.orm import (
    LandedCostVoucherModel,
    PartySettlementModel,
    SettlementVoucherModel,
)
from landed_modules.landed_cost.payables import (
    PayableStateMachine,
    owed_payables_query,
    payable_state,
)
from landed_modules.landed_cost.workflows import SETTLEMENT_WORKFLOW

logger = get_logger("modules.landed_cost.settlement")

PERIOD_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")

FINALIZE = "finalize"


def _party_type(value: SettlementPartyType | str) -> SettlementPartyType:
    try:
        return SettlementPartyType(value)
    except ValueError as exc:
        raise ValidationError(f"Unknown party type: {value!r}", field="party_type") from exc


class SettlementService:
    """
    Aggregates and settles per-party dues across vouchers.

    Contract
    --------
    * ``pending_dues`` is read-only.
    * ``create_settlement`` writes one settlement and its snapshot lines;
      no voucher is touched.
    * ``finalize_settlement`` returns ``FinalizeResult``; a partially
      applied settlement is still a success.

    Guarantees
    ----------
    * Write methods commit on success and roll back on any exception.
    * Exactly one payment is recorded per finalized settlement.
    """

    def __init__(
        self,
        session: Session,
        config: LandedCostConfig | None = None,
        clock: Clock | None = None,
        parties: PartyDirectory | None = None,
        numbering: VoucherNumbering | None = None,
        payments: PaymentSink | None = None,
    ):
        self._session = session
        self._config = config or get_active_config()
        self._clock = clock or SystemClock()
        self._parties = parties or PartyService(session)
        self._numbering = numbering or DocumentNumbering(
            session,
            voucher_prefix=self._config.voucher_prefix,
            voucher_width=self._config.voucher_number_width,
            settlement_prefix=self._config.settlement_prefix,
            settlement_width=self._config.settlement_number_width,
        )
        self._payments = payments or PaymentService(session)
        self._payables = PayableStateMachine(session, self._payments, self._clock)

    # =========================================================================
    # Dues
    # =========================================================================

    def pending_dues(
        self,
        party_type: SettlementPartyType | str,
        category: PayableCategory | str | None = None,
    ) -> list[PartyDues]:
        """
        Owed payables of one category grouped by party, sorted by name.

        Raises:
            ValidationError: ``category`` does not belong to ``party_type``.
        """
        party_type = _party_type(party_type)
        if category is None:
            category = party_type.category
        elif PayableCategory(category) != party_type.category:
            raise ValidationError(
                f"{party_type.value} settlements cover {party_type.category.value} "
                f"payables, not {PayableCategory(category).value}",
                field="category",
            )
        category = PayableCategory(category)

        grouped: dict[UUID, list] = {}
        for model in self._session.execute(owed_payables_query(category)).scalars():
            payable = model.to_dto().payable(category)
            grouped.setdefault(payable.party_id, []).append(payable)

        dues = [
            PartyDues(
                party_id=party_id,
                party_name=self._parties.get_party(party_id).name,
                voucher_count=len(payables),
                total_amount_kwd=sum((p.amount_kwd for p in payables), ZERO),
                vouchers=tuple(payables),
            )
            for party_id, payables in grouped.items()
        ]
        dues.sort(key=lambda d: d.party_name)
        return dues

    # =========================================================================
    # Create
    # =========================================================================

    def _pending_settlement_holding(
        self,
        voucher_id: UUID,
        party_type: SettlementPartyType,
    ) -> PartySettlementModel | None:
        stmt = (
            select(PartySettlementModel)
            .join(SettlementVoucherModel)
            .where(
                SettlementVoucherModel.voucher_id == voucher_id,
                PartySettlementModel.party_type == party_type.value,
                PartySettlementModel.status == SettlementStatus.PENDING.value,
            )
        )
        return self._session.execute(stmt).scalars().first()

    def create_settlement(
        self,
        party_type: SettlementPartyType | str,
        party_id: UUID,
        voucher_ids: Sequence[UUID],
        period: str,
        actor_id: UUID,
        settlement_date: date | None = None,
        notes: str | None = None,
    ) -> Settlement:
        """
        Snapshot the named vouchers' category amounts into a pending settlement.

        Postconditions:
            - ``total_amount_kwd`` is the sum of the snapshotted amounts.
            - No voucher is mutated.
        """
        party_type = _party_type(party_type)
        category = party_type.category

        with LogContext.bind(actor_id=str(actor_id)):
            try:
                if not period or not PERIOD_PATTERN.match(period):
                    raise ValidationError(
                        f"Settlement period must be YYYY-MM, got {period!r}",
                        field="settlement_period",
                    )
                voucher_ids = list(voucher_ids or ())
                if not voucher_ids:
                    raise ValidationError("No voucher selected", field="voucher_ids")
                if len(set(voucher_ids)) != len(voucher_ids):
                    raise ValidationError(
                        "A voucher may appear only once per settlement", field="voucher_ids"
                    )
                try:
                    party = self._parties.get_party(party_id)
                except PartyNotFoundError as exc:
                    raise ValidationError(
                        f"Unknown party: {party_id}", field="party_id"
                    ) from exc

                stmt = (
                    select(LandedCostVoucherModel)
                    .where(LandedCostVoucherModel.id.in_(voucher_ids))
                    .with_for_update()
                )
                by_id = {m.id: m for m in self._session.execute(stmt).scalars()}

                snapshot: list[tuple[LandedCostVoucherModel, Decimal]] = []
                for voucher_id in voucher_ids:
                    model = by_id.get(voucher_id)
                    if model is None:
                        raise VoucherNotFoundError(str(voucher_id))
                    voucher_party, amount, status, _ = payable_state(model, category)
                    if voucher_party != party_id:
                        raise ValidationError(
                            f"Voucher {model.voucher_number} {category.value} is not owed "
                            f"to {party.name}",
                            field="voucher_ids",
                        )
                    if status != PayableStatus.PENDING:
                        raise InvalidStateError(
                            "payable",
                            f"{model.voucher_number}/{category.value}",
                            status.value,
                            "not pending",
                        )
                    if amount <= ZERO:
                        raise ValidationError(
                            f"Voucher {model.voucher_number} has nothing to settle",
                            field="voucher_ids",
                        )
                    holder = self._pending_settlement_holding(model.id, party_type)
                    if holder is not None:
                        raise ConflictError(
                            "voucher",
                            model.voucher_number,
                            f"already in pending settlement {holder.settlement_number}",
                        )
                    snapshot.append((model, amount))

                settlement_date = settlement_date or self._clock.today()
                settlement = PartySettlementModel(
                    settlement_number=self._numbering.next_settlement_number(
                        settlement_date.year
                    ),
                    party_type=party_type.value,
                    party_id=party_id,
                    settlement_period=period,
                    settlement_date=settlement_date,
                    total_amount_kwd=sum((amount for _, amount in snapshot), ZERO),
                    status=SettlementStatus.PENDING.value,
                    notes=notes,
                    created_by_id=actor_id,
                )
                settlement.lines = [
                    SettlementVoucherModel(
                        voucher_id=model.id,
                        voucher_number=model.voucher_number,
                        amount_kwd=amount,
                        sort_order=index,
                        created_by_id=actor_id,
                    )
                    for index, (model, amount) in enumerate(snapshot)
                ]
                self._session.add(settlement)
                self._session.flush()
                result = settlement.to_dto()
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise

            logger.info(
                "settlement_created",
                extra={
                    "settlement_id": str(result.id),
                    "settlement_number": result.settlement_number,
                    "party_type": party_type.value,
                    "voucher_count": result.voucher_count,
                    "total_amount_kwd": format_money(result.total_amount_kwd),
                },
            )
            return result

    # =========================================================================
    # Finalize
    # =========================================================================

    def _load_for_update(self, settlement_id: UUID) -> PartySettlementModel:
        stmt = (
            select(PartySettlementModel)
            .where(PartySettlementModel.id == settlement_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        model = self._session.execute(stmt).scalar_one_or_none()
        if model is None:
            raise SettlementNotFoundError(str(settlement_id))
        return model

    def _mark_finalized(
        self,
        settlement: PartySettlementModel,
        payment_id: UUID,
        account_ref: str,
        notes: str | None,
        actor_id: UUID,
    ) -> None:
        values = {
            "status": SettlementStatus.FINALIZED.value,
            "payment_id": payment_id,
            "account_ref": account_ref,
            "finalized_at": self._clock.now_utc(),
            "updated_by_id": actor_id,
        }
        if notes is not None:
            values["notes"] = notes
        stmt = (
            update(PartySettlementModel)
            .where(PartySettlementModel.id == settlement.id)
            .where(PartySettlementModel.status == SettlementStatus.PENDING.value)
            .values(values)
            .execution_options(synchronize_session=False)
        )
        if self._session.execute(stmt).rowcount != 1:
            raise InvalidStateError(
                "settlement",
                settlement.settlement_number,
                SettlementStatus.FINALIZED.value,
                "finalized concurrently",
            )
        self._session.expire(settlement)

    def _apply_line(
        self,
        settlement: PartySettlementModel,
        line: SettlementVoucherModel,
        category: PayableCategory,
        payment_id: UUID,
        actor_id: UUID,
    ) -> bool:
        """Flip one snapshotted voucher.  False when it had to be skipped."""
        try:
            with self._session.begin_nested():
                stmt = (
                    select(LandedCostVoucherModel)
                    .where(LandedCostVoucherModel.id == line.voucher_id)
                    .with_for_update()
                    .execution_options(populate_existing=True)
                )
                voucher = self._session.execute(stmt).scalar_one_or_none()
                if voucher is None:
                    raise VoucherNotFoundError(str(line.voucher_id))
                self._payables.check_payable(voucher, category)
                party_id, _, status, _ = payable_state(voucher, category)
                if party_id != settlement.party_id:
                    raise InvalidStateError(
                        "payable",
                        f"{voucher.voucher_number}/{category.value}",
                        status.value,
                        "party changed since the settlement was created",
                    )
                self._payables.mark_paid(voucher, category, payment_id, actor_id)
        except LandedCostError as exc:
            logger.warning(
                "settlement_voucher_skipped",
                extra={
                    "voucher_id": str(line.voucher_id),
                    "voucher_number": line.voucher_number,
                    "reason": str(exc),
                },
            )
            return False
        return True

    def finalize_settlement(
        self,
        settlement_id: UUID,
        account_ref: str,
        actor_id: UUID,
        notes: str | None = None,
        payment_type: str = "bank_transfer",
    ) -> FinalizeResult:
        """
        Pay a pending settlement and flip every snapshotted voucher.

        One outgoing payment for the snapshot total is recorded against
        ``account_ref``.  Vouchers that cannot be flipped any more (paid
        elsewhere, deleted, reassigned) are skipped and reported.

        Raises:
            SettlementNotFoundError: Unknown settlement.
            InvalidStateError: Settlement is not pending.
            ValidationError: ``account_ref`` is blank.
        """
        with LogContext.bind(actor_id=str(actor_id), settlement_id=str(settlement_id)):
            try:
                settlement = self._load_for_update(settlement_id)
                if SETTLEMENT_WORKFLOW.find_transition(settlement.status, FINALIZE) is None:
                    raise InvalidStateError(
                        "settlement",
                        settlement.settlement_number,
                        settlement.status,
                        "already finalized",
                    )
                if not account_ref or not account_ref.strip():
                    raise ValidationError(
                        "An account is required to finalize a settlement",
                        field="account_ref",
                    )
                account_ref = account_ref.strip()
                party_type = SettlementPartyType(settlement.party_type)
                category = party_type.category

                payment_id = self._payments.record_payment(
                    PaymentRequest(
                        payee_id=settlement.party_id,
                        amount_kwd=settlement.total_amount_kwd,
                        payment_date=self._clock.today(),
                        payment_type=payment_type,
                        reference=settlement.settlement_number,
                        account_ref=account_ref,
                        notes=notes
                        or (
                            f"Settlement {settlement.settlement_number} for "
                            f"{party_type.value} - {settlement.settlement_period}"
                        ),
                    ),
                    actor_id,
                )
                self._mark_finalized(settlement, payment_id, account_ref, notes, actor_id)

                skipped: list[UUID] = []
                for line in settlement.lines:
                    applied = self._apply_line(settlement, line, category, payment_id, actor_id)
                    line.applied = applied
                    if not applied:
                        skipped.append(line.voucher_id)

                self._session.flush()
                result = FinalizeResult(
                    settlement=settlement.to_dto(),
                    skipped_voucher_ids=tuple(skipped),
                )
                self._session.commit()
            except Exception:
                self._session.rollback()
                raise

            logger.info(
                "settlement_finalized",
                extra={
                    "settlement_number": result.settlement.settlement_number,
                    "payment_id": str(payment_id),
                    "applied_count": result.settlement.voucher_count - len(skipped),
                    "skipped_count": len(skipped),
                    "total_amount_kwd": format_money(result.settlement.total_amount_kwd),
                },
            )
            return result

    # =========================================================================
    # Reads
    # =========================================================================

    def get_settlement(self, settlement_id: UUID) -> Settlement:
        model = self._session.get(PartySettlementModel, settlement_id)
        if model is None:
            raise SettlementNotFoundError(str(settlement_id))
        return model.to_dto()

    def list_settlements(
        self,
        party_type: SettlementPartyType | str | None = None,
        status: SettlementStatus | str | None = None,
        party_id: UUID | None = None,
    ) -> list[Settlement]:
        stmt = select(PartySettlementModel)
        if party_type is not None:
            stmt = stmt.where(PartySettlementModel.party_type == _party_type(party_type).value)
        if status is not None:
            stmt = stmt.where(PartySettlementModel.status == SettlementStatus(status).value)
        if party_id is not None:
            stmt = stmt.where(PartySettlementModel.party_id == party_id)
        stmt = stmt.order_by(PartySettlementModel.settlement_number)
        return [model.to_dto() for model in self._session.execute(stmt).scalars()]
