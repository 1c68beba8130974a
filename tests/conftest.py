"""
Pytest fixtures for the landed-cost test suite.

Provides:
- A database session per test, rolled back at teardown
- Deterministic clock and actor id
- Seeded parties and purchase order factories
- Voucher and settlement service fixtures

Environment Variables:
- LANDED_TEST_DATABASE_URL: database URL for the suite.  Defaults to an
  in-memory SQLite database; set a postgresql:// URL to run against
  PostgreSQL (requires the ``postgres`` extra).
"""

import json
import logging
import os
from datetime import date, datetime, timezone
from decimal import Decimal
from io import StringIO
from typing import Generator
from uuid import UUID, uuid4

import pytest
from sqlalchemy.orm import Session

from landed_config.schema import LandedCostConfig
from landed_kernel.db.engine import drop_tables, init_engine_from_url, reset_engine
from landed_kernel.domain.clock import DeterministicClock
from landed_kernel.domain.dtos import NewLineItem
from landed_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from landed_kernel.models.party import PartyType
from landed_kernel.services.party_service import PartyService
from landed_kernel.services.payment_service import PaymentService
from landed_kernel.services.purchase_order_service import PurchaseOrderService
from landed_modules._orm_registry import create_all_tables
from landed_modules.landed_cost.service import LandedCostVoucherService
from landed_modules.landed_cost.settlement import SettlementService

# Test actor ID for all test operations
TEST_ACTOR_ID = UUID("00000000-0000-4000-a000-0000000000ff")

DEFAULT_TEST_URL = "sqlite://"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture landed_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, voucher_service):
            voucher_service.create_voucher(...)
            logs = captured_logs()
            assert any(r["message"] == "voucher_created" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("landed_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


def get_database_url() -> str:
    return os.environ.get("LANDED_TEST_DATABASE_URL", DEFAULT_TEST_URL)


@pytest.fixture(scope="session")
def db_engine():
    engine = init_engine_from_url(get_database_url())
    yield engine
    reset_engine()


@pytest.fixture(scope="session")
def db_tables(db_engine):
    create_all_tables()
    yield
    drop_tables()


@pytest.fixture(scope="function")
def session(db_tables, db_engine) -> Generator[Session, None, None]:
    """Provide a database session for testing.

    Uses the SQLAlchemy 2.0 ``join_transaction_mode`` pattern:
    - Opens a dedicated connection with an outer transaction
    - Creates a session that *joins* the outer transaction
    - Any ``session.commit()`` inside the test releases a savepoint; it
      does NOT actually commit to the database
    - At teardown the outer transaction is rolled back, undoing ALL data
      changes made during the test
    """
    conn = db_engine.connect()
    trans = conn.begin()
    sess = Session(bind=conn, join_transaction_mode="create_savepoint", expire_on_commit=False)
    yield sess
    try:
        sess.close()
    finally:
        try:
            trans.rollback()
        finally:
            conn.close()


# =============================================================================
# Core fixtures
# =============================================================================


@pytest.fixture
def test_actor_id() -> UUID:
    return TEST_ACTOR_ID


@pytest.fixture
def deterministic_clock():
    return DeterministicClock(datetime(2025, 3, 14, 9, 30, 0, tzinfo=timezone.utc))


@pytest.fixture
def config() -> LandedCostConfig:
    return LandedCostConfig()


@pytest.fixture
def party_service(session: Session) -> PartyService:
    return PartyService(session)


@pytest.fixture
def purchase_order_service(session: Session) -> PurchaseOrderService:
    return PurchaseOrderService(session)


@pytest.fixture
def payment_service(session: Session) -> PaymentService:
    return PaymentService(session)


@pytest.fixture
def voucher_service(session, config, deterministic_clock) -> LandedCostVoucherService:
    return LandedCostVoucherService(session, config=config, clock=deterministic_clock)


@pytest.fixture
def settlement_service(session, config, deterministic_clock) -> SettlementService:
    return SettlementService(session, config=config, clock=deterministic_clock)


# =============================================================================
# Reference data
# =============================================================================


@pytest.fixture
def create_party(session: Session, party_service: PartyService, test_actor_id: UUID):
    """Factory registering (and committing) a party; returns its PartyInfo."""

    def _create(party_type: PartyType, name: str | None = None, code: str | None = None):
        code = code or f"{PartyType(party_type).value[:3].upper()}-{uuid4().hex[:8]}"
        party = party_service.create_party(
            party_code=code,
            party_type=party_type,
            name=name or code,
            actor_id=test_actor_id,
        )
        session.commit()
        return party

    return _create


@pytest.fixture
def forwarder(create_party):
    return create_party(PartyType.LOGISTIC, name="Gulf Freight Co")


@pytest.fixture
def partner(create_party):
    return create_party(PartyType.PARTNER, name="Ahmed Partner")


@pytest.fixture
def packer(create_party):
    return create_party(PartyType.PACKING, name="Box & Wrap")


@pytest.fixture
def supplier(create_party):
    return create_party(PartyType.SUPPLIER, name="Shenzhen Electronics")


@pytest.fixture
def create_po(session: Session, purchase_order_service: PurchaseOrderService, test_actor_id: UUID):
    """
    Factory recording a purchase order.

    Lines are ``(item_name, quantity, unit_price)`` tuples; prices are
    strings so no float ever enters the system.
    """

    def _create(*lines: tuple, supplier_id: UUID | None = None, po_number: str | None = None):
        po_id = purchase_order_service.create_purchase_order(
            po_number=po_number or f"PO-{uuid4().hex[:8]}",
            order_date=date(2025, 3, 1),
            lines=[
                NewLineItem(item_name=name, quantity=qty, unit_price_kwd=Decimal(price))
                for name, qty, price in lines
            ],
            actor_id=test_actor_id,
            supplier_id=supplier_id,
        )
        session.commit()
        return po_id

    return _create


@pytest.fixture
def two_purchase_orders(create_po):
    """10 units at 5.000 and 5 units at 8.000: Q = 15."""
    po_a = create_po(("Phone case", 10, "5.000"))
    po_b = create_po(("Charger", 5, "8.000"))
    return po_a, po_b
