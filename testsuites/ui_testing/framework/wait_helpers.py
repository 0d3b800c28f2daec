# ================================================================================
# Wait Helpers Module
# ================================================================================
#
# Bounded waits for UI state that converges asynchronously after a click or
# navigation (e.g. a radio button becoming checked).
#
# Key Features:
#   - Fixed-interval or exponential backoff polling
#   - Named wait scenarios with configurable timeouts
#   - Supports sync and async check functions
#   - A timeout always ends in WaitTimeoutError, never an indefinite hang
#
# Usage:
#   checked = await wait_until(check_checked, scenario="selection",
#                              description="Female radio selected")
#
# ================================================================================

import asyncio
import random
import time
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Union

from loguru import logger

from formprobe_tools.common import get_config


CheckResult = Tuple[bool, Any]
CheckFn = Callable[[], Union[CheckResult, Awaitable[CheckResult]]]


@dataclass(frozen=True)
class WaitConfig:
    """
    Configuration for wait operations.

    Attributes:
        initial_interval: Initial wait interval in seconds
        multiplier: Multiplier for exponential backoff (1.0 = fixed interval)
        max_interval: Maximum interval between attempts
        timeout: Total timeout in seconds
        jitter: Add random jitter to the interval
    """
    initial_interval: float = 0.25
    multiplier: float = 2.0
    max_interval: float = 2.0
    timeout: float = 10.0
    jitter: bool = False


WAIT_SCENARIOS: Dict[str, WaitConfig] = {
    "default": WaitConfig(),

    # Selected-state convergence after a click
    "selection": WaitConfig(
        initial_interval=0.1,
        multiplier=1.0,
        max_interval=0.1,
        timeout=5.0,
    ),
}


class WaitTimeoutError(Exception):
    """Raised when a wait operation times out."""

    def __init__(self, message: str, last_result: Any = None, last_error: Optional[str] = None):
        super().__init__(message)
        self.last_result = last_result
        self.last_error = last_error


def get_wait_config(scenario: str) -> WaitConfig:
    """
    Get wait configuration for a scenario.

    The "selection" scenario picks up `timeouts.selection_s` and
    `timeouts.poll_interval_s` from configuration when set.
    """
    config = WAIT_SCENARIOS.get(scenario, WAIT_SCENARIOS["default"])
    if scenario == "selection":
        interval = float(get_config("timeouts.poll_interval_s", config.initial_interval))
        config = replace(
            config,
            initial_interval=interval,
            max_interval=interval,
            timeout=float(get_config("timeouts.selection_s", config.timeout)),
        )
    return config


def calculate_next_interval(current_interval: float, config: WaitConfig) -> float:
    """
    Calculate the next wait interval with exponential backoff and jitter.

    Args:
        current_interval: Current interval in seconds
        config: Wait configuration

    Returns:
        Next interval in seconds
    """
    next_interval = min(
        current_interval * config.multiplier,
        config.max_interval
    )

    if config.jitter:
        # +/- 25%
        jitter_factor = 0.75 + (random.random() * 0.5)
        next_interval = next_interval * jitter_factor

    return next_interval


async def wait_until(
    check_fn: CheckFn,
    scenario: str = "default",
    description: str = "Waiting for condition",
    config: Optional[WaitConfig] = None,
) -> Any:
    """
    Poll a condition until it holds or the timeout expires.

    Args:
        check_fn: Sync or async function returning (success, result)
        scenario: Predefined scenario name for configuration
        description: Human-readable description for logging
        config: Optional custom WaitConfig (overrides scenario)

    Returns:
        Result from check_fn when successful

    Raises:
        WaitTimeoutError: If timeout is reached without success

    Example:
        async def check_checked():
            checked = await radio.is_checked()
            return checked, checked

        await wait_until(check_checked, scenario="selection",
                         description="Female radio selected")
    """
    if config is None:
        config = get_wait_config(scenario)

    start_time = time.monotonic()
    current_interval = config.initial_interval
    attempt = 0
    last_result = None
    last_error = None

    logger.debug(
        f"Starting wait: {description} "
        f"(timeout={config.timeout}s, scenario={scenario})"
    )

    while True:
        attempt += 1

        try:
            outcome = check_fn()
            if asyncio.iscoroutine(outcome) or isinstance(outcome, asyncio.Future):
                outcome = await outcome
            success, result = outcome
            last_result = result

            if success:
                logger.debug(
                    f"Wait successful after {attempt} attempts "
                    f"({time.monotonic() - start_time:.2f}s): {description}"
                )
                return result

        except Exception as e:
            last_error = f"{type(e).__name__}: {e}"
            logger.warning(f"Attempt {attempt} failed with error: {last_error}")

        elapsed = time.monotonic() - start_time
        remaining = config.timeout - elapsed
        if remaining <= 0:
            error_msg = (
                f"Timeout after {elapsed:.2f}s waiting for: {description}. "
                f"Last result: {last_result}, Last error: {last_error}"
            )
            logger.error(error_msg)
            raise WaitTimeoutError(error_msg, last_result=last_result, last_error=last_error)

        await asyncio.sleep(min(current_interval, remaining))
        current_interval = calculate_next_interval(current_interval, config)


__all__ = [
    "WaitConfig",
    "WAIT_SCENARIOS",
    "WaitTimeoutError",
    "get_wait_config",
    "calculate_next_interval",
    "wait_until",
]
