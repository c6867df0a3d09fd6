"""
Bill reconciliation.

Every order sent to a seller ends in exactly one call here: ``on_reply``
when the seller answered, ``on_unreachable`` when the transport failed.
Outcomes are applied to the seller directory and reported to the seller;
nothing raised while reconciling escapes to the dispatcher.
"""

import json
from collections import Counter
from enum import Enum
from typing import Any

import structlog

from ..buyer.orders import OrderService
from ..errors import (
    BillMismatchError,
    MalformedReplyError,
    MarketSimError,
    UnknownSellerError,
    UnreachableError,
)
from ..infrastructure.message_schemas import Bill, Feedback
from ..infrastructure.transport import SellerReply
from ..money import fix_precision
from ..sellers.models import Seller
from ..sellers.service import SellerService

logger = structlog.get_logger()


class ReconciliationOutcome(str, Enum):
    """Possible outcomes of one order sent to one seller."""
    PAID = "paid"                  # Bill matched, seller credited
    MISMATCH = "mismatch"          # Bill differed after rounding
    MALFORMED = "malformed"        # Reply was not a usable bill
    DECLINED = "declined"          # Seller answered without a bill
    UNREACHABLE = "unreachable"    # Transport failure, seller set offline


class BillReconciler:
    """
    Applies seller replies to seller state.

    Success path (2xx reply with a body):
        set online -> parse -> validate -> compare rounded totals ->
        credit + INFO feedback, or ERROR feedback
    Failure path (transport error):
        set offline, log; no feedback since the seller cannot be reached

    A non-2xx status means the seller declined the order and changes
    nothing; an empty 2xx reply only marks the seller online.
    """

    def __init__(self, seller_service: SellerService, order_service: OrderService):
        self.seller_service = seller_service
        self.order_service = order_service
        self.outcomes: Counter[ReconciliationOutcome] = Counter()

    async def on_reply(
        self,
        seller: Seller,
        expected_bill: Bill,
        reply: SellerReply,
    ) -> ReconciliationOutcome:
        """Reconcile a seller's HTTP reply against the expected bill."""
        if not reply.is_success:
            logger.warning(
                "seller.declined_order",
                seller=seller.name,
                status=reply.status_code,
            )
            return self._record(ReconciliationOutcome.DECLINED)

        try:
            # Online as soon as the seller answers, before its bill is checked
            self.seller_service.set_online(seller)

            if not reply.body.strip():
                logger.info("seller.empty_reply", seller=seller.name)
                return self._record(ReconciliationOutcome.DECLINED)

            logger.info("seller.replied", seller=seller.name, reply=reply.text)

            payload = self._decode(reply)
            self.order_service.validate_bill(payload)
            actual_bill = Bill(total=payload["total"])
            self.reconcile(seller, expected_bill, actual_bill)
            return self._record(ReconciliationOutcome.PAID)

        except BillMismatchError as e:
            logger.warning(
                "reconciliation.mismatch",
                seller=seller.name,
                expected=e.expected,
                actual=e.actual,
            )
            self.seller_service.notify(seller, Feedback.error(str(e)))
            return self._record(ReconciliationOutcome.MISMATCH)

        except MarketSimError as e:
            logger.warning("reconciliation.malformed", seller=seller.name, error=str(e))
            self.seller_service.notify(seller, Feedback.error(str(e)))
            return self._record(ReconciliationOutcome.MALFORMED)

    def reconcile(self, seller: Seller, expected_bill: Bill, actual_bill: Bill) -> float:
        """
        Compare two bills at cent precision and credit the seller on match.

        Returns:
            The amount credited

        Raises:
            BillMismatchError: If the rounded totals differ
        """
        expected_total = fix_precision(expected_bill.total, 2)
        actual_total = fix_precision(actual_bill.total, 2)

        if expected_total != actual_total:
            raise BillMismatchError(seller.name, expected_total, actual_total)

        balance = self.seller_service.credit(seller, expected_total)
        logger.debug("reconciliation.credited", seller=seller.name, cash=balance)
        self.seller_service.notify(
            seller, Feedback.info(f"Hey, {seller.name} earned {expected_total}")
        )
        return expected_total

    async def on_unreachable(
        self,
        seller: Seller,
        error: UnreachableError,
    ) -> ReconciliationOutcome:
        """Mark a seller offline after a transport failure."""
        try:
            self.seller_service.set_offline(seller)
        except UnknownSellerError:
            logger.warning("seller.unknown", seller=seller.name)

        logger.error(
            "seller.unreachable",
            seller=seller.name,
            url=error.url,
            error=repr(error.cause) if error.cause else None,
        )
        return self._record(ReconciliationOutcome.UNREACHABLE)

    def get_stats(self) -> dict[str, int]:
        """Outcome counts since start."""
        return {outcome.value: self.outcomes[outcome] for outcome in ReconciliationOutcome}

    @staticmethod
    def _decode(reply: SellerReply) -> Any:
        try:
            return json.loads(reply.body)
        except (ValueError, RecursionError):
            raise MalformedReplyError("The response is not valid JSON.") from None

    def _record(self, outcome: ReconciliationOutcome) -> ReconciliationOutcome:
        self.outcomes[outcome] += 1
        return outcome
