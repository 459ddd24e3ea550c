"""Bounded fixed-interval polling.

Turns a single status check into a wait that ends when the status matches,
a fatal status shows up, or the deadline passes.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Collection

from loguru import logger
from tenacity import (
    RetryError,
    retry,
    retry_if_result,
    stop_after_delay,
    stop_any,
    wait_fixed,
)

from eksward.core.exceptions import FatalStatusError, TimeoutError

type StatusCheck = Callable[[], str]


def wait_for_status(
    check: StatusCheck,
    want: str,
    *,
    interval: float,
    timeout: float,
    fatal: Collection[str] = (),
    description: str = "resource",
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    """Poll ``check`` until it returns ``want``.

    The first check runs immediately; later ones run every ``interval``
    seconds. Exceptions raised by ``check`` are not retried.

    Args:
        check: Returns the current status of the resource.
        want: Terminal status that ends the wait.
        interval: Seconds between checks.
        timeout: Seconds after which the wait gives up.
        fatal: Statuses from which ``want`` can no longer be reached.
        description: Resource description for logs and errors.
        sleep: Sleep function, replaceable in tests. The deadline also counts
            the time handed to ``sleep``, so a fake clock ends the wait.

    Returns:
        The matching status.

    Raises:
        TimeoutError: ``timeout`` elapsed; carries the last observed status.
        FatalStatusError: ``check`` returned a status in ``fatal``.
    """

    @retry(
        stop=stop_any(
            stop_after_delay(timeout),
            lambda state: state.idle_for >= timeout,
        ),
        wait=wait_fixed(interval),
        retry=retry_if_result(lambda status: status != want),
        sleep=sleep,
    )
    def _poll() -> str:
        status = check()
        logger.debug(
            "{description} status: {status} (want {want})",
            description=description, status=status, want=want,
        )
        if status in fatal:
            raise FatalStatusError(description, status)
        return status

    try:
        return _poll()
    except RetryError as e:
        last_status = e.last_attempt.result()
        raise TimeoutError(description, want, last_status, timeout) from e
