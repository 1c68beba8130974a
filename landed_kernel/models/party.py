"""
Module: landed_kernel.models.party
Responsibility: ORM persistence for the counter-parties the business deals
    with: suppliers, customers, salesmen, logistics carriers, packing
    contractors and profit-sharing partners.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - party_code is unique.
    - party_type is set at creation and classifies the party permanently.

Failure modes:
    - IntegrityError on duplicate party_code (uq_party_code constraint).
"""

from enum import Enum

from sqlalchemy import Boolean, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from landed_kernel.db.base import TrackedBase


class PartyType(str, Enum):
    """Classification of party types.

    LOGISTIC, PACKING and PARTNER parties are the payees of a voucher's
    freight, packing and partner-profit payables.
    """

    SUPPLIER = "supplier"
    CUSTOMER = "customer"
    SALESMAN = "salesman"
    LOGISTIC = "logistic"
    PACKING = "packing"
    PARTNER = "partner"


class Party(TrackedBase):
    """
    External entity the business transacts with.

    Guarantees:
        - party_code is globally unique.
        - is_active gates whether the party may be assigned to new payables.
    """

    __tablename__ = "parties"

    __table_args__ = (
        UniqueConstraint("party_code", name="uq_party_code"),
        Index("idx_party_type", "party_type"),
        Index("idx_party_active", "is_active"),
    )

    party_code: Mapped[str] = mapped_column(String(50), nullable=False)

    party_type: Mapped[PartyType] = mapped_column(String(20), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)

    def __repr__(self) -> str:
        return f"<Party {self.party_code}: {self.name} ({self.party_type})>"
