from dataclasses import dataclass
from typing import Any, Literal, Optional


type Status = Literal['fulfilled', 'none', 'pending', 'rejected']
type ActionType = Literal['fulfilled', 'pending', 'rejected', 'reset']


class UnknownActionError(RuntimeError):
  pass


@dataclass(frozen=True, slots=True)
class LifecycleState:
  """
  A snapshot of the lifecycle of an observed future.

  Attributes
  ----------
  status
    One of `"none"`, `"pending"`, `"fulfilled"` or `"rejected"`.
  value
    The result of the future if fulfilled, the exception it failed with if
    rejected, and `None` otherwise.
  within_threshold
    Whether the pending state started inside the suppression window. This is
    `None` if and only if the status is `"none"`.
  """

  status: Status
  value: Any = None
  within_threshold: Optional[bool] = None

  def settled(self):
    return self.status in ('fulfilled', 'rejected')


NONE_STATE = LifecycleState('none')


@dataclass(frozen=True, slots=True)
class Action:
  type: ActionType
  payload: Any = None

  @classmethod
  def reset(cls):
    return cls('reset')

  @classmethod
  def pending(cls, within_threshold: bool, /):
    return cls('pending', within_threshold)

  @classmethod
  def fulfilled(cls, value: Any, /):
    return cls('fulfilled', value)

  @classmethod
  def rejected(cls, reason: Any, /):
    return cls('rejected', reason)


def reduce_state(state: LifecycleState, action: Action, /) -> LifecycleState:
  """
  Compute the state following the given action.

  The settled states keep the `within_threshold` flag of the state they
  replace. If the new state is equal to the current one, the current instance
  is returned such that an identity check is enough to detect changes.

  Parameters
  ----------
  state
    The current state.
  action
    The action to apply.

  Returns
  -------
  LifecycleState

  Raises
  ------
  UnknownActionError
    If the action type is not recognized.
  """

  match action.type:
    case 'reset':
      new_state = NONE_STATE
    case 'pending':
      new_state = LifecycleState('pending', None, bool(action.payload))
    case 'fulfilled' | 'rejected':
      new_state = LifecycleState(action.type, action.payload, state.within_threshold)
    case _:
      raise UnknownActionError(f'Unknown action type: {action.type!r}')

  return state if new_state == state else new_state


__all__ = [
  'Action',
  'ActionType',
  'LifecycleState',
  'NONE_STATE',
  'Status',
  'UnknownActionError',
  'reduce_state',
]
