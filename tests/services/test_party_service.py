"""
Tests for PartyService, the default PartyDirectory.
"""

from uuid import uuid4

import pytest

from landed_kernel.domain.directories import PartyDirectory
from landed_kernel.exceptions import PartyNotFoundError
from landed_kernel.models.party import PartyType


class TestPartyService:

    def test_satisfies_directory_protocol(self, party_service):
        assert isinstance(party_service, PartyDirectory)

    def test_create_and_get(self, party_service, test_actor_id):
        created = party_service.create_party(
            party_code="LOG-001",
            party_type=PartyType.LOGISTIC,
            name="Gulf Freight Co",
            actor_id=test_actor_id,
        )

        fetched = party_service.get_party(created.id)
        assert fetched == created
        assert fetched.party_type == "logistic"
        assert fetched.is_active

    def test_unknown_party(self, party_service):
        with pytest.raises(PartyNotFoundError) as exc_info:
            party_service.get_party(uuid4())
        assert exc_info.value.code == "PARTY_NOT_FOUND"

    def test_find_by_code(self, party_service, partner):
        assert party_service.find_by_code(partner.party_code) == partner
        assert party_service.find_by_code("NOPE") is None

    def test_list_by_type_skips_inactive(self, party_service, create_party):
        active = create_party(PartyType.PACKING, code="PAK-A")
        inactive = create_party(PartyType.PACKING, code="PAK-B")
        create_party(PartyType.PARTNER, code="PAR-A")
        party_service.deactivate_party(inactive.id)

        listed = party_service.list_by_type(PartyType.PACKING)
        assert [p.id for p in listed] == [active.id]
        assert len(party_service.list_by_type(PartyType.PACKING, active_only=False)) == 2

    def test_deactivate(self, party_service, forwarder):
        assert not party_service.deactivate_party(forwarder.id).is_active
        assert not party_service.get_party(forwarder.id).is_active
