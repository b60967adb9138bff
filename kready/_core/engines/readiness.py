"""
Polling the objects until they reach the desired state.

The objects go through these states after the creation request is accepted::

    Absent -> Requested -> URLAssigned -> NotReady -> Ready

All the transitions are observed by polling only, never by watching.
The status is fetched fresh on every poll and is never cached.

Every wait is bounded by an optional timeout (``None`` means "forever")
and can be interrupted by an optional stopper event; the sleeps between
the polls are interrupted instantly when the stopper is set.
Asyncio cancellation of the waiting task works as usual too.
"""
import asyncio
import logging
from typing import Optional

from kready._cogs.aiokits import aiotime
from kready._cogs.clients import auth, errors, fetching
from kready._cogs.configs import configuration
from kready._cogs.helpers import typedefs
from kready._cogs.structs import references, statuses

default_logger = logging.getLogger(__name__)


class PollingTimeoutError(TimeoutError):
    """ Raised when the object does not reach the desired state in time. """


class PollingStoppedError(Exception):
    """ Raised when the waiting is interrupted by the stopper. """


async def fetch_status(
        *,
        context: auth.APIContext,
        ref: references.ObjectReference,
        logger: Optional[typedefs.Logger] = None,
) -> statuses.ResourceStatus:
    body = await fetching.read_obj(context=context, ref=ref, logger=logger)
    return statuses.parse_status(body)


async def wait_for_url(
        *,
        context: auth.APIContext,
        ref: references.ObjectReference,
        settings: configuration.ClientSettings,
        timeout: Optional[float] = None,
        stopper: Optional[asyncio.Event] = None,
        logger: Optional[typedefs.Logger] = None,
) -> str:
    """
    Wait until the object gets its URL assigned, and return that URL.

    The object can be not yet visible right after its creation, or the API
    can be briefly unavailable, so the API & transport errors are tolerated
    up to a limit of consecutive failures. The parsing errors are not:
    it is unlikely that the malformed statuses will become well-formed.
    """
    logger = logger if logger is not None else default_logger
    deadline = _get_deadline(timeout)
    tolerance = settings.polling.error_tolerance
    failures = 0
    while True:
        _check_stopper(stopper, ref=ref, awaited='the URL')
        try:
            status = await fetch_status(context=context, ref=ref, logger=logger)
        except (errors.APIError, errors.TransportError) as e:
            failures += 1
            if failures > tolerance:
                logger.error(f"Failed to fetch the status {failures} times in a row; escalating: {e}")
                raise
            logger.warning(f"Failed to fetch the status ({failures}/{tolerance}); will retry: {e}")
        else:
            failures = 0
            url = status.public_url
            if url:
                if settings.exposure.upgrade_to_https:
                    url = statuses.upgrade_to_https(url)
                logger.info(f"The URL is assigned: {url}")
                return url
            logger.debug("The URL is not assigned yet.")

        await _sleep_or_expire(settings.polling.creation_interval,
                               deadline=deadline, stopper=stopper, ref=ref, awaited='the URL')


async def wait_for_ready(
        *,
        context: auth.APIContext,
        ref: references.ObjectReference,
        settings: configuration.ClientSettings,
        timeout: Optional[float] = None,
        stopper: Optional[asyncio.Event] = None,
        logger: Optional[typedefs.Logger] = None,
) -> None:
    """
    Wait until the object's ``Ready`` condition is ``"True"``.

    Any error fails the waiting immediately, including the malformed statuses.
    The absent status or conditions mean that the object is not ready yet.
    """
    logger = logger if logger is not None else default_logger
    deadline = _get_deadline(timeout)
    while True:
        _check_stopper(stopper, ref=ref, awaited='the readiness')
        status = await fetch_status(context=context, ref=ref, logger=logger)
        if status.ready:
            logger.info("The object is ready.")
            return

        condition = status.get_condition(statuses.READY)
        if condition is None:
            logger.debug("The object is not ready yet: no readiness condition.")
        else:
            logger.debug(f"The object is not ready yet: {condition.status} "
                         f"({condition.reason or 'no reason'}: {condition.message or 'no message'})")

        await _sleep_or_expire(settings.polling.readiness_interval,
                               deadline=deadline, stopper=stopper, ref=ref, awaited='the readiness')


def _get_deadline(timeout: Optional[float]) -> Optional[float]:
    return None if timeout is None else asyncio.get_running_loop().time() + timeout


def _check_stopper(
        stopper: Optional[asyncio.Event],
        *,
        ref: references.ObjectReference,
        awaited: str,
) -> None:
    if stopper is not None and stopper.is_set():
        raise PollingStoppedError(f"Stopped waiting for {awaited} of {ref}.")


async def _sleep_or_expire(
        interval: float,
        *,
        deadline: Optional[float],
        stopper: Optional[asyncio.Event],
        ref: references.ObjectReference,
        awaited: str,
) -> None:
    # One last poll is done exactly at the deadline; the timeout is raised only after it.
    remaining = None if deadline is None else deadline - asyncio.get_running_loop().time()
    if remaining is not None and remaining <= 0:
        raise PollingTimeoutError(f"Timed out waiting for {awaited} of {ref}.")
    await aiotime.sleep([interval, remaining], wakeup=stopper)
    _check_stopper(stopper, ref=ref, awaited=awaited)
