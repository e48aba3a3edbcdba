from collections.abc import Mapping
from typing import Any, Optional

from .reducer import LifecycleState


def select_by_state[T](mapping: Optional[Mapping[str, T]], state: LifecycleState, default: T, /) -> T:
  """
  Select the entry of a mapping that applies to the given state.

  While the state is within its threshold, the `<status>_within_threshold` key
  takes precedence over the `<status>` key. Keys are matched by presence, so
  an entry explicitly set to `None` is returned as such.

  Parameters
  ----------
  mapping
    The mapping to select from, or `None` to always return the default.
  state
    The state whose status selects the entry.
  default
    The value returned if no key applies.
  """

  if mapping is None:
    return default

  if state.within_threshold:
    threshold_key = f'{state.status}_within_threshold'

    if threshold_key in mapping:
      return mapping[threshold_key]

  if state.status in mapping:
    return mapping[state.status]

  return default


def map_status(status_map: Optional[Mapping[str, Any]], state: LifecycleState, /) -> Any:
  """
  Translate the status of a state into a label.

  Parameters
  ----------
  status_map
    A partial mapping from statuses to labels. Missing keys leave the status
    unchanged.
  state
    The state to translate.

  Returns
  -------
  Any
    The label, which may be `None` if the mapping says so.
  """

  return select_by_state(status_map, state, state.status)


__all__ = [
  'map_status',
  'select_by_state',
]
