"""
Service layer for Party operations.

Returns PartyInfo DTOs instead of ORM entities.  Serves as the default
PartyDirectory for the landed-cost module.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select

from landed_kernel.domain.dtos import PartyInfo
from landed_kernel.exceptions import PartyNotFoundError
from landed_kernel.models.party import Party, PartyType
from landed_kernel.services.base import BaseService


class PartyService(BaseService[Party]):
    """
    Service for reading and registering parties.

    All public methods return PartyInfo DTOs, not ORM Party entities.
    """

    def _to_dto(self, party: Party) -> PartyInfo:
        return PartyInfo(
            id=party.id,
            party_code=party.party_code,
            party_type=PartyType(party.party_type).value,
            name=party.name,
            is_active=party.is_active,
        )

    def _get_by_id(self, party_id: UUID) -> Party:
        party = self.session.get(Party, party_id)
        if party is None:
            raise PartyNotFoundError(str(party_id))
        return party

    def get_party(self, party_id: UUID) -> PartyInfo:
        """
        Get party by ID.

        Raises:
            PartyNotFoundError: If party doesn't exist.
        """
        return self._to_dto(self._get_by_id(party_id))

    def find_by_code(self, party_code: str) -> PartyInfo | None:
        stmt = select(Party).where(Party.party_code == party_code)
        party = self.session.execute(stmt).scalar_one_or_none()
        return self._to_dto(party) if party else None

    def list_by_type(
        self,
        party_type: PartyType,
        active_only: bool = True,
    ) -> list[PartyInfo]:
        """List parties of one type ordered by code."""
        stmt = select(Party).where(Party.party_type == PartyType(party_type).value)
        if active_only:
            stmt = stmt.where(Party.is_active.is_(True))
        stmt = stmt.order_by(Party.party_code)
        return [self._to_dto(p) for p in self.session.execute(stmt).scalars()]

    def create_party(
        self,
        party_code: str,
        party_type: PartyType,
        name: str,
        actor_id: UUID,
        phone: str | None = None,
    ) -> PartyInfo:
        """Register a new party."""
        party = Party(
            party_code=party_code,
            party_type=PartyType(party_type).value,
            name=name,
            phone=phone,
            is_active=True,
            created_by_id=actor_id,
        )
        self.session.add(party)
        self.session.flush()
        return self._to_dto(party)

    def deactivate_party(self, party_id: UUID) -> PartyInfo:
        """Deactivated parties can no longer be assigned to payables."""
        party = self._get_by_id(party_id)
        party.is_active = False
        self.session.flush()
        return self._to_dto(party)
