import dataclasses
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from numbers import Real
from types import MappingProxyType
from typing import Any, Optional

from .labels import select_by_state
from .reducer import LifecycleState


type DelaySpec = float | Mapping[str, float]

DELAY_KEYS = frozenset({
  'fulfilled',
  'fulfilled_within_threshold',
  'rejected',
  'rejected_within_threshold',
})


class InvalidDelayError(ValueError):
  pass


def _check_duration(value: object, name: str, /) -> float:
  # bool is a subclass of int but never a meaningful duration
  if isinstance(value, bool) or not isinstance(value, Real):
    raise InvalidDelayError(f'Invalid {name}: expected a number of seconds, got {value!r}')

  if value < 0:
    raise InvalidDelayError(f'Invalid {name}: {value!r} is negative')

  return float(value)


def normalize_delay(spec: DelaySpec, name: str, /) -> DelaySpec:
  """
  Validate a delay specification.

  Parameters
  ----------
  spec
    Either a single non-negative number of seconds, or a mapping from
    `fulfilled`, `rejected`, `fulfilled_within_threshold` and
    `rejected_within_threshold` to non-negative numbers of seconds.
  name
    The name of the option, used in error messages.

  Returns
  -------
  DelaySpec
    The validated specification, with mappings copied into a read-only
    mapping.

  Raises
  ------
  InvalidDelayError
    If the specification is malformed.
  """

  if isinstance(spec, Mapping):
    if unknown_keys := (set(spec.keys()) - DELAY_KEYS):
      raise InvalidDelayError(f'Invalid {name}: unknown keys {", ".join(sorted(map(repr, unknown_keys)))}')

    return MappingProxyType({key: _check_duration(value, f'{name}[{key!r}]') for key, value in spec.items()})

  return _check_duration(spec, name)


def resolve_delay(spec: DelaySpec, state: LifecycleState, /) -> float:
  """
  Resolve the delay that applies to a settled state.

  Returns
  -------
  float
    The delay in seconds, zero if the specification has no applicable entry.
  """

  if isinstance(spec, Mapping):
    return select_by_state(spec, state, 0.0)

  return spec


@dataclass(frozen=True, slots=True)
class ObserverConfig:
  """
  The options of a `FutureObserver`.

  Attributes
  ----------
  threshold
    The time in seconds during which a pending state is reported as within
    threshold. Zero disables the suppression window.
  settle_delay
    The delay in seconds before calling `on_settle`, either a single number or
    a mapping keyed by `fulfilled`, `rejected`, `fulfilled_within_threshold`
    and `rejected_within_threshold`.
  on_settle
    A function called with the settled state once per settlement.
  status_map
    A partial mapping from statuses, and from `<status>_within_threshold`, to
    the labels reported instead of the raw status.
  reset_delay
    The delay in seconds after which a settled state returns to `"none"`,
    specified like `settle_delay`. Zero disables the reset.
  """

  threshold: float = 0.0
  settle_delay: DelaySpec = 0.0
  on_settle: Optional[Callable[[LifecycleState], object]] = None
  status_map: Optional[Mapping[str, Any]] = None
  reset_delay: DelaySpec = 0.0

  def __post_init__(self):
    object.__setattr__(self, 'threshold', _check_duration(self.threshold, 'threshold'))
    object.__setattr__(self, 'settle_delay', normalize_delay(self.settle_delay, 'settle_delay'))
    object.__setattr__(self, 'reset_delay', normalize_delay(self.reset_delay, 'reset_delay'))

    if (self.on_settle is not None) and not callable(self.on_settle):
      raise TypeError(f'on_settle must be callable, got {self.on_settle!r}')

    if (self.status_map is not None) and not isinstance(self.status_map, Mapping):
      raise TypeError(f'status_map must be a mapping, got {self.status_map!r}')

  def with_changes(self, **changes: Any):
    """
    Create a copy of this configuration with the given options replaced.

    Returns
    -------
    ObserverConfig
    """

    return dataclasses.replace(self, **changes)


__all__ = [
  'DelaySpec',
  'InvalidDelayError',
  'ObserverConfig',
  'normalize_delay',
  'resolve_delay',
]
