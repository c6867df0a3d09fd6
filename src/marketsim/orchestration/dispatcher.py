"""
Dispatcher - the shopping loop.

Each round:
1. Pick the period (reduction + interval) for the current iteration
2. Create one order and its expected bill
3. Send the order to every registered seller without waiting for replies
4. Wait for the period's interval, advance the iteration and repeat

Replies are reconciled whenever they arrive, possibly after later rounds
have started; each one is checked against the expected bill of its own
round.

Usage:
    dispatcher = Dispatcher(seller_service, order_service, reconciler)
    task = dispatcher.start(iteration=0)
    ...
    dispatcher.stop()
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from functools import partial
from typing import Optional

import structlog

from ..buyer.orders import OrderService
from ..buyer.reductions import HALF_PRICE, PAY_THE_PRICE, STANDARD, Reduction
from ..infrastructure.message_schemas import Bill, Order
from ..sellers.service import SellerService
from .reconciliation import BillReconciler
from .time_controller import TimeController

logger = structlog.get_logger()


@dataclass(frozen=True)
class Period:
    """Reduction and shopping interval in effect for an iteration."""

    reduction: Reduction
    shopping_interval_ms: int


@dataclass(frozen=True)
class PromotionWindow:
    """
    A recurring promotion.

    Active for ``duration`` iterations every ``frequency`` iterations,
    starting from the first full cycle (iteration >= frequency).
    """

    frequency: int
    duration: int
    period: Period


# Highest priority first
DEFAULT_WINDOWS: tuple[PromotionWindow, ...] = (
    PromotionWindow(frequency=200, duration=10, period=Period(PAY_THE_PRICE, 8000)),
    PromotionWindow(frequency=100, duration=30, period=Period(HALF_PRICE, 500)),
)
DEFAULT_PERIOD = Period(STANDARD, 5000)


def iteration_has_frequency(iteration: int, frequency: int, duration: int) -> bool:
    """Whether an iteration falls inside a recurring window."""
    return iteration >= frequency and iteration % frequency < duration


def guess_period(
    iteration: int,
    windows: tuple[PromotionWindow, ...] = DEFAULT_WINDOWS,
    default: Period = DEFAULT_PERIOD,
) -> Period:
    """Period in effect for an iteration: first matching window, else default."""
    for window in windows:
        if iteration_has_frequency(iteration, window.frequency, window.duration):
            return window.period
    return default


class DispatcherState(str, Enum):
    """State of the dispatcher loop."""

    STOPPED = "stopped"
    RUNNING = "running"


@dataclass
class RoundReport:
    """What a single round did."""

    iteration: int
    period: Period
    order: Order
    expected_bill: Bill
    sellers_contacted: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        return {
            "iteration": self.iteration,
            "reduction": self.period.reduction.name,
            "shopping_interval_ms": self.period.shopping_interval_ms,
            "order": self.order.model_dump(),
            "expected_total": self.expected_bill.total,
            "sellers_contacted": self.sellers_contacted,
            "timestamp": self.timestamp.isoformat(),
        }


class Dispatcher:
    """
    Drives shopping rounds.

    The iteration counter is the only state that evolves between rounds;
    everything a reply needs is bound into its callbacks at send time.
    """

    def __init__(
        self,
        seller_service: SellerService,
        order_service: OrderService,
        reconciler: BillReconciler,
        time_controller: Optional[TimeController] = None,
        windows: tuple[PromotionWindow, ...] = DEFAULT_WINDOWS,
        default_period: Period = DEFAULT_PERIOD,
    ):
        self.seller_service = seller_service
        self.order_service = order_service
        self.reconciler = reconciler
        self.time_controller = time_controller or TimeController()
        self.windows = windows
        self.default_period = default_period

        self._iteration = 0
        self._state = DispatcherState.STOPPED
        self._task: Optional[asyncio.Task] = None
        self._last_round: Optional[RoundReport] = None

    @property
    def iteration(self) -> int:
        """Iteration the next round will run."""
        return self._iteration

    @property
    def state(self) -> DispatcherState:
        return self._state

    @property
    def last_round(self) -> Optional[RoundReport]:
        return self._last_round

    def guess_period(self, iteration: int) -> Period:
        return guess_period(iteration, self.windows, self.default_period)

    def send_order_to_sellers(self, reduction: Reduction) -> tuple[Order, Bill, int]:
        """
        Create one order and send it to every seller (fan-out).

        Returns as soon as every send is scheduled.

        Returns:
            (order, expected bill, number of sellers contacted)
        """
        order = self.order_service.create_order(reduction)
        expected_bill = self.order_service.bill(order, reduction)

        sellers = self.seller_service.all_sellers()
        for seller in sellers:
            self.order_service.send_order(
                seller,
                order,
                on_success=partial(self.reconciler.on_reply, seller, expected_bill),
                on_failure=partial(self.reconciler.on_unreachable, seller),
            )

        return order, expected_bill, len(sellers)

    def run_iteration(self) -> RoundReport:
        """Run the round for the current iteration and advance the counter."""
        iteration = self._iteration
        period = self.guess_period(iteration)

        logger.info(
            "dispatcher.iteration",
            iteration=iteration,
            reduction=period.reduction.name,
            interval_ms=period.shopping_interval_ms,
        )

        order, expected_bill, contacted = self.send_order_to_sellers(period.reduction)
        self._iteration = iteration + 1

        self._last_round = RoundReport(
            iteration=iteration,
            period=period,
            order=order,
            expected_bill=expected_bill,
            sellers_contacted=contacted,
        )
        return self._last_round

    async def start_buying(self, iteration: int = 0, max_rounds: Optional[int] = None) -> None:
        """
        Run rounds until stopped.

        Args:
            iteration: Iteration to start from
            max_rounds: Stop after this many rounds (None = run forever)
        """
        if iteration < 0:
            raise ValueError("Iteration must be non-negative")

        self._iteration = iteration
        self._state = DispatcherState.RUNNING
        self.time_controller.start()
        rounds = 0

        logger.info("dispatcher.started", iteration=iteration)

        try:
            while self._state == DispatcherState.RUNNING:
                report = self.run_iteration()
                rounds += 1
                if max_rounds is not None and rounds >= max_rounds:
                    break
                await self.time_controller.wait_millis(report.period.shopping_interval_ms)
        finally:
            self._state = DispatcherState.STOPPED
            logger.info("dispatcher.stopped", iteration=self._iteration, rounds=rounds)

    def start(self, iteration: int = 0, max_rounds: Optional[int] = None) -> asyncio.Task:
        """
        Start the shopping loop as a background task.

        Returns:
            The loop task
        """
        if self._task and not self._task.done():
            return self._task

        self._task = asyncio.create_task(self.start_buying(iteration, max_rounds))
        return self._task

    def stop(self) -> None:
        """Stop the loop; the current wait is cancelled."""
        self._state = DispatcherState.STOPPED
        self.time_controller.stop()
        if self._task and not self._task.done():
            self._task.cancel()

    def get_status(self) -> dict:
        """Get current status as a dictionary."""
        period = self.guess_period(self._iteration)
        transport = self.order_service.transport
        return {
            "state": self._state.value,
            "iteration": self._iteration,
            "reduction": period.reduction.name,
            "shopping_interval_ms": period.shopping_interval_ms,
            "outcomes": self.reconciler.get_stats(),
            "in_flight": transport.in_flight if transport is not None else 0,
            "time": self.time_controller.get_status(),
            "last_round": self._last_round.to_dict() if self._last_round else None,
        }
