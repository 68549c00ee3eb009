"""Provider-agnostic instance readiness polling."""

import asyncio
import logging

from wgdeploy.provisioning.errors import ReadinessFetchError, ReadinessTimeout

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 10
DEFAULT_MAX_ATTEMPTS = 30


async def wait_until_ready(
    fetch_state, resource_id, max_attempts=DEFAULT_MAX_ATTEMPTS, interval=DEFAULT_POLL_INTERVAL, sleep=asyncio.sleep
):
    """Poll *fetch_state* until the instance is ready or attempts run out.

    Sleeps *interval* seconds between checks, never after the last one.
    Fetch errors are not retried.

    Args:
        fetch_state: async callable taking *resource_id* and returning an
            ``InstanceState``.
        sleep: awaitable sleep function, replaceable in tests.

    Returns:
        The ready ``InstanceState``.

    Raises:
        ReadinessFetchError: *fetch_state* raised.
        ReadinessTimeout: not ready after *max_attempts* checks.
    """
    logger.info("Waiting for instance to become active and get an IP...")

    state = None
    for attempt in range(1, max_attempts + 1):
        try:
            state = await fetch_state(resource_id)
        except Exception as e:
            logger.error(f"Error while polling for instance status: {e}")
            raise ReadinessFetchError(resource_id, e) from e

        if state.is_ready:
            logger.info("Instance is active!")
            return state

        last = attempt == max_attempts
        suffix = "No attempts left." if last else f"Retrying in {interval}s..."
        logger.info(f"  [{attempt}/{max_attempts}] Status: {state.status}, IP: {state.main_ip}. {suffix}")
        if last:
            break
        await sleep(interval)

    raise ReadinessTimeout(resource_id, max_attempts, state)
