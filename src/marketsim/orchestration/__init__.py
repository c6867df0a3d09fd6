"""
Orchestration layer for the marketplace load generator.

Modules:
- dispatcher: Period selection and the shopping loop
- reconciliation: Applying seller replies to seller state
- time_controller: Interval waits with acceleration and pause
"""

from .dispatcher import (
    DEFAULT_PERIOD,
    DEFAULT_WINDOWS,
    Dispatcher,
    DispatcherState,
    Period,
    PromotionWindow,
    RoundReport,
    guess_period,
    iteration_has_frequency,
)

from .reconciliation import (
    BillReconciler,
    ReconciliationOutcome,
)

from .time_controller import (
    TimeController,
    TimeControllerState,
)


__all__ = [
    # Dispatcher
    "Dispatcher",
    "DispatcherState",
    "Period",
    "PromotionWindow",
    "RoundReport",
    "DEFAULT_PERIOD",
    "DEFAULT_WINDOWS",
    "guess_period",
    "iteration_has_frequency",
    # Reconciliation
    "BillReconciler",
    "ReconciliationOutcome",
    # Time controller
    "TimeController",
    "TimeControllerState",
]
