"""
Tests for bill reconciliation.

Validates that:
1. Matching bills (after rounding to cents) credit the seller and send INFO feedback
2. Mismatched or malformed bills send ERROR feedback and leave cash untouched
3. Answering sellers are marked online before their bill is checked
4. Unreachable sellers are marked offline without feedback
"""

import json

import pytest

from marketsim.errors import BillMismatchError, UnreachableError
from marketsim.infrastructure.message_schemas import Bill
from marketsim.infrastructure.transport import SellerReply
from marketsim.orchestration.reconciliation import ReconciliationOutcome


def reply(payload, status: int = 200) -> SellerReply:
    body = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
    return SellerReply(status, body)


class TestSuccessPath:
    """Tests for replies carrying a bill."""

    @pytest.mark.asyncio
    async def test_matching_bill_credits_seller(self, reconciler, transport, alice):
        outcome = await reconciler.on_reply(alice, Bill(total=55.0), reply({"total": 55.0}))

        assert outcome == ReconciliationOutcome.PAID
        assert alice.cash == 55.0
        assert alice.online is True

        [feedback] = transport.sent_to("/feedback")
        assert feedback["payload"] == {"type": "INFO", "content": "Hey, alice earned 55.0"}

    @pytest.mark.asyncio
    async def test_rounding_tolerates_float_noise(self, reconciler, alice):
        """54.999999 and 55.00 are the same bill once rounded to cents."""
        outcome = await reconciler.on_reply(alice, Bill(total=55.00), reply({"total": 54.999999}))

        assert outcome == ReconciliationOutcome.PAID
        assert alice.cash == 55.0

    @pytest.mark.asyncio
    async def test_unrounded_expected_total(self, reconciler, alice):
        """(10*1 + 20*2) * 1.1 is 55.00000000000001 as a float."""
        expected = Bill(total=(10 * 1 + 20 * 2) * 1.1)

        outcome = await reconciler.on_reply(alice, expected, reply({"total": 55}))

        assert outcome == ReconciliationOutcome.PAID
        assert alice.cash == 55.0

    @pytest.mark.asyncio
    async def test_credit_is_rounded_expected_total(self, reconciler, alice):
        await reconciler.on_reply(alice, Bill(total=12.345678), reply({"total": 12.35}))
        assert alice.cash == 12.35

    @pytest.mark.asyncio
    async def test_cash_accumulates_over_rounds(self, reconciler, alice):
        await reconciler.on_reply(alice, Bill(total=10.0), reply({"total": 10.0}))
        await reconciler.on_reply(alice, Bill(total=5.5), reply({"total": 5.5}))
        assert alice.cash == 15.5

    @pytest.mark.asyncio
    async def test_mismatch_sends_error(self, reconciler, transport, alice):
        outcome = await reconciler.on_reply(alice, Bill(total=55.0), reply({"total": 50.0}))

        assert outcome == ReconciliationOutcome.MISMATCH
        assert alice.cash == 0.0
        assert alice.online is True

        [feedback] = transport.sent_to("/feedback")
        assert feedback["payload"]["type"] == "ERROR"
        assert feedback["payload"]["content"] == (
            "alice replied 50.0 but the right answer was 55.0"
        )

    @pytest.mark.asyncio
    async def test_one_cent_off_is_a_mismatch(self, reconciler, alice):
        outcome = await reconciler.on_reply(alice, Bill(total=55.0), reply({"total": 55.01}))
        assert outcome == ReconciliationOutcome.MISMATCH

    @pytest.mark.asyncio
    async def test_missing_total(self, reconciler, transport, alice):
        """Error feedback, cash unchanged, seller still online."""
        outcome = await reconciler.on_reply(alice, Bill(total=55.0), reply({"amount": 55.0}))

        assert outcome == ReconciliationOutcome.MALFORMED
        assert alice.cash == 0.0
        assert alice.online is True

        [feedback] = transport.sent_to("/feedback")
        assert feedback["payload"] == {
            "type": "ERROR",
            "content": 'The field "total" in the response is missing.',
        }

    @pytest.mark.asyncio
    async def test_non_numeric_total(self, reconciler, transport, alice):
        outcome = await reconciler.on_reply(alice, Bill(total=55.0), reply({"total": "55.0"}))

        assert outcome == ReconciliationOutcome.MALFORMED
        assert transport.sent_to("/feedback")[0]["payload"]["content"] == (
            '"Total" is not a number.'
        )

    @pytest.mark.asyncio
    async def test_invalid_json(self, reconciler, transport, alice):
        outcome = await reconciler.on_reply(alice, Bill(total=55.0), reply(b"fifty-five"))

        assert outcome == ReconciliationOutcome.MALFORMED
        assert alice.online is True
        assert transport.sent_to("/feedback")[0]["payload"]["type"] == "ERROR"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            b'{"total": 1' + b"0" * 400 + b"}",  # int too large for a float
            b"[" * 100_000,  # nesting deeper than the decoder's recursion limit
        ],
        ids=["oversized-total", "deeply-nested"],
    )
    async def test_undecodable_total_is_malformed(self, reconciler, transport, alice, body):
        """Replies that break float conversion or the JSON decoder still get feedback."""
        outcome = await reconciler.on_reply(alice, Bill(total=55.0), reply(body))

        assert outcome == ReconciliationOutcome.MALFORMED
        assert alice.cash == 0.0
        assert alice.online is True
        [feedback] = transport.sent_to("/feedback")
        assert feedback["payload"]["type"] == "ERROR"
        assert reconciler.get_stats()["malformed"] == 1

    @pytest.mark.asyncio
    async def test_huge_total_is_a_mismatch(self, reconciler, transport, alice):
        outcome = await reconciler.on_reply(alice, Bill(total=55.0), reply({"total": 1e300}))

        assert outcome == ReconciliationOutcome.MISMATCH
        assert alice.cash == 0.0
        assert transport.sent_to("/feedback")[0]["payload"]["type"] == "ERROR"

    @pytest.mark.asyncio
    async def test_offline_seller_comes_back_online(self, reconciler, seller_service, alice):
        seller_service.set_offline(alice)
        await reconciler.on_reply(alice, Bill(total=1.0), reply({"total": 1.0}))
        assert alice.online is True


class TestDeclinedOrders:
    """Tests for replies without a bill."""

    @pytest.mark.asyncio
    async def test_non_success_status_changes_nothing(self, reconciler, transport, alice):
        outcome = await reconciler.on_reply(alice, Bill(total=55.0), reply({"total": 55.0}, 404))

        assert outcome == ReconciliationOutcome.DECLINED
        assert alice.online is False
        assert alice.cash == 0.0
        assert transport.posts == []

    @pytest.mark.asyncio
    async def test_empty_body_only_marks_online(self, reconciler, transport, alice):
        outcome = await reconciler.on_reply(alice, Bill(total=55.0), SellerReply(200, b""))

        assert outcome == ReconciliationOutcome.DECLINED
        assert alice.online is True
        assert alice.cash == 0.0
        assert transport.posts == []


class TestFailurePath:
    """Tests for unreachable sellers."""

    @pytest.mark.asyncio
    async def test_unreachable_sets_offline_without_feedback(
        self, reconciler, seller_service, transport, alice
    ):
        seller_service.set_online(alice)

        outcome = await reconciler.on_unreachable(
            alice, UnreachableError("http://localhost:3001/shop/order")
        )

        assert outcome == ReconciliationOutcome.UNREACHABLE
        assert alice.online is False
        assert transport.posts == []

    @pytest.mark.asyncio
    async def test_unreachable_twice_is_idempotent(self, reconciler, alice):
        error = UnreachableError("http://localhost:3001/shop/order")
        await reconciler.on_unreachable(alice, error)
        await reconciler.on_unreachable(alice, error)
        assert alice.online is False
        assert alice.cash == 0.0


class TestReconcile:
    """Tests for the bill comparison itself."""

    def test_raises_on_mismatch(self, reconciler, alice):
        with pytest.raises(BillMismatchError) as exc_info:
            reconciler.reconcile(alice, Bill(total=10.004), Bill(total=10.006))

        assert exc_info.value.expected == 10.0
        assert exc_info.value.actual == 10.01

    def test_returns_credited_amount(self, reconciler, alice):
        assert reconciler.reconcile(alice, Bill(total=10.004), Bill(total=9.995)) == 10.0


class TestStats:
    """Tests for outcome counting."""

    @pytest.mark.asyncio
    async def test_outcomes_counted(self, reconciler, alice, bob):
        await reconciler.on_reply(alice, Bill(total=1.0), reply({"total": 1.0}))
        await reconciler.on_reply(bob, Bill(total=1.0), reply({"total": 2.0}))
        await reconciler.on_unreachable(bob, UnreachableError("http://localhost:3002/order"))

        stats = reconciler.get_stats()
        assert stats["paid"] == 1
        assert stats["mismatch"] == 1
        assert stats["unreachable"] == 1
        assert stats["malformed"] == 0
        assert stats["declined"] == 0
