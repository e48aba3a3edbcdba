import asyncio
import contextlib
from asyncio import Future
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Optional


@dataclass(slots=True)
class Broadcast[T]:
  """
  A class that delivers published values to registered listeners and wakes up
  waiters with the next published value.

  Listeners are called synchronously, in registration order, and exceptions
  they raise propagate to the publisher.
  """

  _future: Optional[Future[T]] = field(default=None, init=False, repr=False)
  _listeners: list[Callable[[T], object]] = field(default_factory=list, init=False, repr=False)

  def add_listener(self, listener: Callable[[T], object], /):
    """
    Register a listener.

    Parameters
    ----------
    listener
      The function to call with each published value.

    Returns
    -------
    Callable[[], None]
      A function which unregisters the listener. Calling it more than once has
      no effect.
    """

    self._listeners.append(listener)

    def remove():
      with contextlib.suppress(ValueError):
        self._listeners.remove(listener)

    return remove

  def publish(self, value: T, /):
    if (future := self._future) is not None:
      self._future = None

      if not future.done():
        future.set_result(value)

    # Using a copy because listeners may unregister themselves
    for listener in self._listeners.copy():
      listener(value)

  def close(self):
    """
    Unregister all listeners and cancel all waiters.
    """

    self._listeners.clear()

    if (future := self._future) is not None:
      self._future = None
      future.cancel()

  async def wait(self):
    """
    Wait for the next published value.

    Returns
    -------
    T
    """

    if self._future is None:
      self._future = asyncio.get_running_loop().create_future()

    return await asyncio.shield(self._future)


__all__ = [
  'Broadcast',
]
