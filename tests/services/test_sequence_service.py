"""
Tests for SequenceService and DocumentNumbering.
"""

from landed_kernel.services.sequence_service import DocumentNumbering, SequenceService


class TestSequenceService:

    def test_first_value_is_one(self, session):
        assert SequenceService(session).next_value("test_seq") == 1

    def test_monotonic(self, session):
        seq = SequenceService(session)
        values = [seq.next_value("test_seq") for _ in range(5)]
        assert values == [1, 2, 3, 4, 5]

    def test_sequences_are_independent(self, session):
        seq = SequenceService(session)
        seq.next_value("a")
        seq.next_value("a")
        assert seq.next_value("b") == 1

    def test_current_value_does_not_consume(self, session):
        seq = SequenceService(session)
        assert seq.current_value("test_seq") == 0
        seq.next_value("test_seq")
        assert seq.current_value("test_seq") == 1
        assert seq.current_value("test_seq") == 1

    def test_reset(self, session):
        seq = SequenceService(session)
        seq.next_value("test_seq")
        seq.reset("test_seq", 41)
        assert seq.next_value("test_seq") == 42


class TestDocumentNumbering:

    def test_voucher_numbers(self, session):
        numbering = DocumentNumbering(session)
        assert numbering.next_voucher_number() == "LCV-0001"
        assert numbering.next_voucher_number() == "LCV-0002"

    def test_peek_does_not_consume(self, session):
        numbering = DocumentNumbering(session)
        assert numbering.peek_voucher_number() == "LCV-0001"
        assert numbering.peek_voucher_number() == "LCV-0001"
        assert numbering.next_voucher_number() == "LCV-0001"
        assert numbering.peek_voucher_number() == "LCV-0002"

    def test_settlement_numbers_restart_each_year(self, session):
        numbering = DocumentNumbering(session)
        assert numbering.next_settlement_number(2025) == "SETTLE-2025-00001"
        assert numbering.next_settlement_number(2025) == "SETTLE-2025-00002"
        assert numbering.next_settlement_number(2026) == "SETTLE-2026-00001"

    def test_custom_format(self, session):
        numbering = DocumentNumbering(
            session, voucher_prefix="LC", voucher_width=6, settlement_prefix="ST", settlement_width=3
        )
        assert numbering.next_voucher_number() == "LC-000001"
        assert numbering.next_settlement_number(2025) == "ST-2025-001"

    def test_width_overflow_keeps_digits(self, session):
        SequenceService(session).reset(SequenceService.VOUCHER, 9999)
        assert DocumentNumbering(session).next_voucher_number() == "LCV-10000"
