import logging
from asyncio import Future
from collections.abc import Callable
from typing import Any, Optional

from .future_state import FutureRecord
from .state_cache import StateCache


logger = logging.getLogger('aiostatus')


def subscribe_future(
  future: Future[Any],
  /,
  *,
  cache: Optional[StateCache] = None,
  on_finally: Optional[Callable[[bool], object]] = None,
  on_fulfilled: Optional[Callable[[Any], object]] = None,
  on_rejected: Optional[Callable[[BaseException], object]] = None,
):
  """
  Subscribe to the settlement of a future.

  When the future settles, either `on_fulfilled` or `on_rejected` is called,
  followed by `on_finally`, unless the subscription was cancelled beforehand.
  Callbacks are always called from the event loop, even if the future is
  already done, and a cancelled future is reported through `on_rejected`.

  Parameters
  ----------
  future
    The future to subscribe to.
  cache
    A cache in which to record the state of the future. The future is
    recorded as pending immediately and as settled when it settles, even if
    the subscription was cancelled in the meantime.
  on_finally
    A function called with `True` if the future was fulfilled and `False`
    otherwise.
  on_fulfilled
    A function called with the result of the future.
  on_rejected
    A function called with the exception the future failed with.

  Returns
  -------
  Callable[[], None]
    A function which cancels the subscription. Calling it more than once has
    no effect.
  """

  cancelled = False

  if cache is not None:
    cache.mark_pending(future)

  def callback(future: Future[Any]):
    record = FutureRecord.absorb_future(future)
    assert record.settled()

    if cancelled:
      logger.debug(f'Ignoring settlement of {future!r} after cancellation')
      return

    fulfilled = (record.status == 'fulfilled')

    if fulfilled:
      if on_fulfilled is not None:
        on_fulfilled(record.value)
    elif on_rejected is not None:
      on_rejected(record.value)

    if on_finally is not None:
      on_finally(fulfilled)

  future.add_done_callback(callback)

  def cancel():
    nonlocal cancelled

    if not cancelled:
      cancelled = True
      future.remove_done_callback(callback)

  return cancel


__all__ = [
  'subscribe_future',
]
