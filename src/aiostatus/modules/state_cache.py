from asyncio import Future
from dataclasses import dataclass, field
from typing import Any, Literal, Optional
from weakref import WeakKeyDictionary

from .future_state import FutureRecord


@dataclass(slots=True)
class StateCache:
  """
  A table of the last known state of futures, keyed by future identity.

  Entries only move forward, from `"pending"` to `"fulfilled"` or
  `"rejected"`, and are never removed explicitly. Futures are held weakly so
  that a settled future is not kept alive by the cache.
  """

  _records: WeakKeyDictionary[Future[Any], FutureRecord] = field(default_factory=WeakKeyDictionary, init=False, repr=False)

  def __contains__(self, future: object, /):
    return future in self._records

  def __len__(self):
    return len(self._records)

  def mark_pending(self, future: Future[Any], /):
    """
    Record the given future as pending, unless it already has an entry.

    When an entry is created, the future is watched so that its outcome is
    recorded once it settles, regardless of who else is subscribed to it.

    Parameters
    ----------
    future
      The future to record.
    """

    if future not in self._records:
      self._records[future] = FutureRecord.new_pending()
      future.add_done_callback(self._absorb)

  def mark_settled(self, future: Future[Any], status: Literal["fulfilled", "rejected"], value: Any, /):
    """
    Record the outcome of the given future.

    The call has no effect if the future was already recorded as settled.

    Parameters
    ----------
    future
      The settled future.
    status
      Either `"fulfilled"` or `"rejected"`.
    value
      The result of the future, or the exception it failed with.
    """

    if status not in ("fulfilled", "rejected"):
      raise ValueError(f"Invalid settled status: {status!r}")

    record = self._records.get(future)

    if (record is None) or not record.settled():
      self._records[future] = FutureRecord(status=status, value=value)

  def read(self, future: Optional[Future[Any]], /):
    """
    Read the last known state of the given future.

    Parameters
    ----------
    future
      The future to look up, or `None`.

    Returns
    -------
    FutureRecord
      A copy of the recorded entry. A future without an entry is presumed to
      be already in flight and reported as pending.
    """

    if future is None:
      return FutureRecord.new_none()

    record = self._records.get(future)

    if record is None:
      return FutureRecord.new_pending()

    return FutureRecord(status=record.status, value=record.value)

  def _absorb(self, future: Future[Any], /):
    record = FutureRecord.absorb_future(future)
    self.mark_settled(future, record.status, record.value)  # type: ignore


default_cache = StateCache()


def get_cached_state(future: Optional[Future[Any]], /, *, cache: Optional[StateCache] = None):
  """
  Get the last known state of a future.

  This is safe to call at any time, including for futures which have never
  been observed.

  Parameters
  ----------
  future
    The future to look up, or `None`.
  cache
    The cache to read from. Defaults to the process-wide cache.

  Returns
  -------
  FutureRecord
  """

  return (cache if cache is not None else default_cache).read(future)


__all__ = [
  'StateCache',
  'default_cache',
  'get_cached_state',
]
