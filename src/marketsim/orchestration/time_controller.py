"""
Time Controller for the dispatcher.

Turns the period intervals (milliseconds of marketplace time) into real
waits, with optional acceleration and pause/resume.

10x acceleration = a 5000 ms standard period waits 0.5 real seconds
"""

import asyncio
from enum import Enum
from typing import Awaitable, Callable, Optional

import structlog

logger = structlog.get_logger()


Sleep = Callable[[float], Awaitable[None]]


class TimeControllerState(str, Enum):
    """State of the time controller."""

    STOPPED = "stopped"
    RUNNING = "running"
    PAUSED = "paused"


class TimeController:
    """
    Clock used between dispatch rounds.

    The sleep function is injectable so tests can run the scheduler
    without real timers.

    Example:
        controller = TimeController(acceleration=10.0)
        controller.start()

        # Waits 0.5 real seconds
        await controller.wait_millis(5000)
    """

    def __init__(
        self,
        acceleration: float = 1.0,
        sleep: Optional[Sleep] = None,
    ):
        """
        Initialize time controller.

        Args:
            acceleration: Time multiplier (10.0 = 10x speed)
            sleep: Coroutine function used to wait (default: asyncio.sleep)
        """
        self.acceleration = acceleration
        self._sleep: Sleep = sleep or asyncio.sleep
        self._state = TimeControllerState.STOPPED
        self._resumed = asyncio.Event()
        self._resumed.set()

    @property
    def acceleration(self) -> float:
        """Get current time acceleration factor."""
        return self._acceleration

    @acceleration.setter
    def acceleration(self, value: float) -> None:
        """Set time acceleration factor."""
        if value <= 0:
            raise ValueError("Acceleration must be positive")
        self._acceleration = value

    @property
    def state(self) -> TimeControllerState:
        return self._state

    @property
    def is_running(self) -> bool:
        """Check if time controller is running (not paused or stopped)."""
        return self._state == TimeControllerState.RUNNING

    def start(self) -> None:
        """Start (or resume) the time controller."""
        if self._state == TimeControllerState.RUNNING:
            return

        self._state = TimeControllerState.RUNNING
        self._resumed.set()
        logger.info("time_controller.started", acceleration=self._acceleration)

    def pause(self) -> None:
        """Pause: waits in progress hold until resume."""
        if self._state != TimeControllerState.RUNNING:
            return

        self._state = TimeControllerState.PAUSED
        self._resumed.clear()
        logger.info("time_controller.paused")

    def resume(self) -> None:
        """Resume from paused state."""
        self.start()

    def stop(self) -> None:
        """Stop the time controller, releasing paused waits."""
        self._state = TimeControllerState.STOPPED
        self._resumed.set()
        logger.info("time_controller.stopped")

    def real_seconds(self, millis: float) -> float:
        """Real seconds corresponding to an interval in milliseconds."""
        return millis / 1000 / self._acceleration

    async def wait_millis(self, millis: float) -> None:
        """
        Wait for an interval, scaled by acceleration.

        If paused, the wait holds until resume or stop before returning.
        """
        if millis > 0:
            await self._sleep(self.real_seconds(millis))

        while self._state == TimeControllerState.PAUSED:
            await self._resumed.wait()

    def get_status(self) -> dict:
        """Get current status as a dictionary."""
        return {
            "state": self._state.value,
            "acceleration": self._acceleration,
        }
