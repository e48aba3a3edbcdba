import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Optional

from .config import ObserverConfig, resolve_delay
from .reducer import LifecycleState
from .scheduler import Scheduler, TimerHandle


@dataclass(slots=True)
class SettleNotifier:
  """
  A class that calls the `on_settle` option once per settlement observed in a
  stream of states.

  The delay is resolved from the configuration when the settled state is
  received, while the callback is looked up when the notification fires.

  Parameters
  ----------
  get_config
    A function returning the current configuration.
  scheduler
    The scheduler used for delayed notifications.
  """

  get_config: Callable[[], ObserverConfig] = field(repr=False)
  scheduler: Scheduler = field(repr=False)

  _handle: Optional[TimerHandle] = field(default=None, init=False, repr=False)
  _last_state: Optional[LifecycleState] = field(default=None, init=False)
  _logger: logging.Logger = field(default_factory=(lambda: logging.getLogger('aiostatus')), init=False, repr=False)

  @property
  def scheduled(self):
    """
    Whether a delayed notification is waiting to fire.
    """

    return self._handle is not None

  def update(self, state: LifecycleState, /):
    """
    Feed the notifier with the current state.

    States equal to the last one received are ignored.

    Parameters
    ----------
    state
      The current state.
    """

    if (self._last_state is not None) and (state == self._last_state):
      return

    self._last_state = state

    if not state.settled():
      return

    delay = resolve_delay(self.get_config().settle_delay, state)

    if delay > 0:
      self._cancel_timer()
      self._logger.debug(f'Scheduling settle notification in {delay}s')
      self._handle = self.scheduler.call_later(delay, lambda: self._fire(state))
    else:
      self._notify(state)

  def cancel(self):
    """
    Cancel the pending notification, if any, and forget the last state.

    Calling this method more than once has no effect.
    """

    self._cancel_timer()
    self._last_state = None

  def _cancel_timer(self):
    if self._handle is not None:
      self._logger.debug('Cancelling settle notification')
      self._handle.cancel()
      self._handle = None

  def _fire(self, state: LifecycleState, /):
    self._handle = None
    self._notify(state)

  def _notify(self, state: LifecycleState, /):
    on_settle = self.get_config().on_settle

    if on_settle is not None:
      on_settle(state)


__all__ = [
  'SettleNotifier',
]
