import logging
from asyncio import Future
from collections.abc import Callable
from typing import Any, Optional

from .adapter import subscribe_future
from .config import DelaySpec, resolve_delay
from .reducer import Action, LifecycleState
from .scheduler import Scheduler, TimerHandle
from .state_cache import StateCache


logger = logging.getLogger('aiostatus')


def track_future(
  future: Optional[Future[Any]],
  /,
  *,
  dispatch: Callable[[Action], object],
  scheduler: Scheduler,
  threshold: float,
  cache: Optional[StateCache] = None,
  reset_delay: DelaySpec = 0.0,
  settled: bool = False,
):
  """
  Drive a state reducer from the lifecycle of a future.

  The pending action is dispatched immediately. With a positive threshold, it
  is first dispatched as within threshold and then again as outside of it
  once the threshold elapses, unless the future settled in the meantime.

  Parameters
  ----------
  future
    The future to track. If `None`, a reset action is dispatched and nothing
    else happens.
  dispatch
    The function receiving actions.
  scheduler
    The scheduler used for the threshold and reset timers.
  threshold
    The duration of the suppression window, in seconds.
  cache
    The cache in which to record the state of the future.
  reset_delay
    The delay after which a reset action follows the settlement, zero to
    never reset.
  settled
    Whether the future is already known to be settled, in which case no
    pending action is dispatched and no threshold timer is started.

  Returns
  -------
  Callable[[], None]
    A function which stops tracking the future and cancels all timers. No
    action is dispatched after it has been called.
  """

  if future is None:
    dispatch(Action.reset())
    return lambda: None

  active = True
  within_threshold = (threshold > 0)
  timers = dict[str, TimerHandle]()

  def dispatch_if_active(action: Action, /):
    if active:
      dispatch(action)
    else:
      logger.debug(f'Dropping stale {action.type!r} action for {future!r}')

  def cancel_timer(name: str, /):
    if (handle := timers.pop(name, None)) is not None:
      handle.cancel()

  def threshold_elapsed():
    nonlocal within_threshold

    timers.pop('threshold', None)
    within_threshold = False

    logger.debug(f'Threshold of {threshold}s elapsed for {future!r}')
    dispatch_if_active(Action.pending(False))

  def reset_elapsed():
    timers.pop('reset', None)
    dispatch_if_active(Action.reset())

  def settle(action: Action, /):
    cancel_timer('threshold')
    dispatch_if_active(action)

    delay = resolve_delay(reset_delay, LifecycleState(action.type, action.payload, within_threshold))

    if active and (delay > 0):
      timers['reset'] = scheduler.call_later(delay, reset_elapsed)

  if not settled:
    if threshold > 0:
      dispatch(Action.pending(True))
      timers['threshold'] = scheduler.call_later(threshold, threshold_elapsed)
    else:
      dispatch(Action.pending(False))

  cancel_subscription = subscribe_future(
    future,
    cache=cache,
    on_fulfilled=(lambda value: settle(Action.fulfilled(value))),
    on_rejected=(lambda reason: settle(Action.rejected(reason))),
  )

  def cancel():
    nonlocal active

    if active:
      active = False
      cancel_subscription()

      for handle in timers.values():
        handle.cancel()

      timers.clear()

  return cancel


__all__ = [
  'track_future',
]
