import logging
from asyncio import Future
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Optional

from .broadcast import Broadcast
from .config import ObserverConfig
from .labels import map_status
from .reducer import NONE_STATE, Action, LifecycleState, reduce_state
from .scheduler import LoopScheduler, Scheduler
from .settle import SettleNotifier
from .state_cache import StateCache, default_cache
from .threshold import track_future


@dataclass(frozen=True, slots=True)
class ObservedState:
  """
  The state of an observed future as reported to consumers.

  This is identical to `LifecycleState` except that `status` is the label
  selected by the `status_map` option, which may be any object.
  """

  status: Any
  value: Any = None
  within_threshold: Optional[bool] = None


class FutureObserver:
  """
  An object that derives a debounced lifecycle state from the future it is
  currently observing.

  The observed future is set and replaced with `observe()`. Replacing it
  cancels everything related to the previous future, including pending settle
  notifications, before the new future is subscribed to.

  Parameters
  ----------
  config
    The initial configuration.
  scheduler
    The scheduler used for all timers. Defaults to the running event loop.
  cache
    The cache shared with other observers. Defaults to the process-wide
    cache.
  """

  def __init__(
    self,
    config: Optional[ObserverConfig] = None,
    /,
    *,
    cache: Optional[StateCache] = None,
    scheduler: Optional[Scheduler] = None,
  ):
    self._broadcast = Broadcast[ObservedState]()
    self._cache = cache if cache is not None else default_cache
    self._closed = False
    self._config = config if config is not None else ObserverConfig()
    self._future: Optional[Future[Any]] = None
    self._logger = logging.getLogger('aiostatus')
    self._observing = False
    self._scheduler = scheduler if scheduler is not None else LoopScheduler()
    self._settle_notifier = SettleNotifier(lambda: self._config, self._scheduler)
    self._state = NONE_STATE
    self._public_state = self._derive_public_state()
    self._untrack: Optional[Callable[[], None]] = None

  def __repr__(self):
    return f'{self.__class__.__name__}(future={self._future!r}, status={self._state.status!r})'

  def __enter__(self):
    return self

  def __exit__(self, exc_type, exc_value, traceback):  # noqa: ANN001
    self.close()

  @property
  def cache(self):
    return self._cache

  @property
  def canonical_state(self):
    """
    The current state, before applying the `status_map` option.
    """

    return self._state

  @property
  def closed(self):
    return self._closed

  @property
  def config(self):
    return self._config

  @property
  def future(self):
    return self._future

  @property
  def state(self):
    """
    The current state as reported to consumers.

    The same instance is returned as long as the state does not change.
    """

    return self._public_state

  def add_listener(self, listener: Callable[[ObservedState], object], /):
    """
    Register a function called with the new state every time it changes.

    Parameters
    ----------
    listener
      The function to call.

    Returns
    -------
    Callable[[], None]
      A function which unregisters the listener.
    """

    self._check_open()
    return self._broadcast.add_listener(listener)

  def observe(self, future: Optional[Future[Any]], config: Optional[ObserverConfig] = None, /):
    """
    Start observing a future, or keep observing it if it is already the
    observed one.

    Parameters
    ----------
    future
      The future to observe, or `None` to observe nothing.
    config
      A new configuration, if any. Changes to `threshold` and `reset_delay`
      only apply to futures observed afterwards, while other options apply
      immediately.

    Returns
    -------
    ObservedState
      The current state.
    """

    self._check_open()

    if config is not None:
      self._set_config(config)

    if self._observing and (future is self._future):
      return self._public_state

    self._teardown()

    self._future = future
    self._observing = True
    self._logger.debug(f'Observing {future!r}')

    record = self._cache.read(future)

    # Listeners and the settle callback run synchronously below; if one of
    # them raises, the observer is left observing nothing
    try:
      if record.settled():
        self._set_state(LifecycleState(record.status, record.value, self._config.threshold > 0))

      self._untrack = track_future(
        future,
        cache=self._cache,
        dispatch=self._dispatch,
        reset_delay=self._config.reset_delay,
        scheduler=self._scheduler,
        settled=record.settled(),
        threshold=self._config.threshold,
      )
    except BaseException:
      self._logger.debug(f'Failed to start observing {future!r}')
      self._teardown()
      self._future = None
      self._observing = False
      raise

    return self._public_state

  def configure(self, config: ObserverConfig, /):
    """
    Replace the configuration without changing the observed future.

    Parameters
    ----------
    config
      The new configuration.
    """

    self._check_open()
    self._set_config(config)

  def close(self):
    """
    Stop observing and release all listeners and waiters.

    Calling this method more than once has no effect.
    """

    if not self._closed:
      self._logger.debug(f'Closing observer of {self._future!r}')
      self._closed = True
      self._teardown()
      self._broadcast.close()

  async def wait_change(self):
    """
    Wait for the next state change.

    Returns
    -------
    ObservedState
      The new state.
    """

    self._check_open()
    return await self._broadcast.wait()

  def _check_open(self):
    if self._closed:
      raise RuntimeError('Observer is closed')

  def _derive_public_state(self):
    state = self._state
    return ObservedState(map_status(self._config.status_map, state), state.value, state.within_threshold)

  def _dispatch(self, action: Action, /):
    self._set_state(reduce_state(self._state, action))

  def _publish(self):
    public_state = self._derive_public_state()

    if public_state != self._public_state:
      self._public_state = public_state
      self._broadcast.publish(public_state)

  def _set_config(self, config: ObserverConfig, /):
    if not isinstance(config, ObserverConfig):
      raise TypeError(f'Expected an ObserverConfig, got {config!r}')

    status_map_changed = (config.status_map != self._config.status_map)
    self._config = config

    if status_map_changed:
      self._publish()

  def _set_state(self, state: LifecycleState, /):
    if state != self._state:
      self._state = state
      self._public_state = self._derive_public_state()
      self._broadcast.publish(self._public_state)

    # The notifier ignores repeated states, but must see the first state
    # following a teardown even if it equals the previous one
    self._settle_notifier.update(self._state)

  def _teardown(self):
    if self._untrack is not None:
      self._logger.debug(f'Tearing down subscription to {self._future!r}')
      self._untrack()
      self._untrack = None

    self._settle_notifier.cancel()


def observe(
  future: Optional[Future[Any]],
  config: Optional[ObserverConfig] = None,
  /,
  *,
  cache: Optional[StateCache] = None,
  scheduler: Optional[Scheduler] = None,
) -> FutureObserver:
  """
  Create an observer already observing the given future.

  Returns
  -------
  FutureObserver
  """

  observer = FutureObserver(config, cache=cache, scheduler=scheduler)
  observer.observe(future)

  return observer


__all__ = [
  'FutureObserver',
  'ObservedState',
  'observe',
]
