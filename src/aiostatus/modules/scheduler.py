import asyncio
import heapq
from asyncio import AbstractEventLoop
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Optional, Protocol


class TimerHandle(Protocol):
  def cancel(self) -> None:
    ...


class Scheduler(Protocol):
  """
  An object able to call a function after a delay.

  Any asyncio event loop satisfies this protocol.
  """

  def call_later(self, delay: float, callback: Callable[[], object], /) -> TimerHandle:
    ...


@dataclass(slots=True)
class LoopScheduler:
  """
  A scheduler backed by an asyncio event loop.

  Parameters
  ----------
  loop
    The loop on which to schedule callbacks. Defaults to the loop running at
    the time each callback is scheduled.
  """

  loop: Optional[AbstractEventLoop] = None

  def call_later(self, delay: float, callback: Callable[[], object], /) -> TimerHandle:
    loop = self.loop if self.loop is not None else asyncio.get_running_loop()
    return loop.call_later(delay, callback)


@dataclass(eq=False, slots=True)
class ManualTimerHandle:
  callback: Callable[[], object] = field(repr=False)
  when: float
  cancelled: bool = False

  def cancel(self):
    self.cancelled = True


@dataclass(slots=True)
class ManualScheduler:
  """
  A scheduler driven by a virtual clock which only moves forward when
  `advance()` is called.

  Callbacks due at the same time run in the order in which they were
  scheduled.
  """

  _counter: int = field(default=0, init=False, repr=False)
  _queue: list[tuple[float, int, ManualTimerHandle]] = field(default_factory=list, init=False, repr=False)
  _time: float = field(default=0.0, init=False)

  @property
  def pending_count(self):
    """
    The number of scheduled callbacks which have neither run nor been
    cancelled.
    """

    return sum(1 for _, _, handle in self._queue if not handle.cancelled)

  def time(self):
    return self._time

  def call_later(self, delay: float, callback: Callable[[], object], /) -> TimerHandle:
    handle = ManualTimerHandle(callback, self._time + max(delay, 0.0))
    heapq.heappush(self._queue, (handle.when, self._counter, handle))
    self._counter += 1

    return handle

  def advance(self, seconds: float = 0.0, /):
    """
    Move the clock forward and run the callbacks which became due.

    Callbacks scheduled by other callbacks run during the same call if they
    become due before the target time.

    Parameters
    ----------
    seconds
      The amount of time to move forward by.
    """

    if seconds < 0:
      raise ValueError('Cannot move the clock backwards')

    target_time = self._time + seconds

    while self._queue and (self._queue[0][0] <= target_time):
      when, _, handle = heapq.heappop(self._queue)
      self._time = when

      if not handle.cancelled:
        handle.cancelled = True
        handle.callback()

    self._time = target_time


__all__ = [
  'LoopScheduler',
  'ManualScheduler',
  'Scheduler',
  'TimerHandle',
]
