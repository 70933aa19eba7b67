"""
Run independent store operations concurrently and join on all of them.

Each call gets its own :class:`Outcome` slot, so a failure in one call does
not affect how the others are read. Callers decide whether a failed slot
aborts the operation (:func:`gather`) or is tolerated (:func:`join`).
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, List, NamedTuple, Optional

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4


class Outcome(NamedTuple):
    """The result of one call in a fan-out batch."""

    value: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        """Whether the call returned without raising."""
        return self.error is None


def _capture(call: Callable[[], Any]) -> Outcome:
    try:
        return Outcome(value=call())
    except Exception as e:
        return Outcome(error=e)


def join(*calls: Callable[[], Any],
         max_workers: int = DEFAULT_MAX_WORKERS) -> List[Outcome]:
    """
    Run ``calls`` concurrently and wait for all of them.

    Parameters
    ----------
    calls : callables
        Zero-argument callables, e.g. built with :func:`functools.partial`.
    max_workers : int
        Upper bound on the number of calls in flight.

    Returns
    -------
    list
        One :class:`Outcome` per call, in the order the calls were given.

    """
    if len(calls) == 1:
        return [_capture(calls[0])]
    if not calls:
        return []
    with ThreadPoolExecutor(max_workers=min(len(calls), max_workers)) as ex:
        return list(ex.map(_capture, calls))


def gather(*calls: Callable[[], Any],
           max_workers: int = DEFAULT_MAX_WORKERS) -> List[Any]:
    """
    Run ``calls`` concurrently; raise the first error once all have finished.

    The calls are not cancelled or undone when one of them fails.
    """
    outcomes = join(*calls, max_workers=max_workers)
    for outcome in outcomes:
        if not outcome.ok:
            raise outcome.error     # type: ignore
    return [outcome.value for outcome in outcomes]
