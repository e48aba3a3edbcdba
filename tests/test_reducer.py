from unittest import TestCase

from aiostatus import NONE_STATE, Action, LifecycleState, UnknownActionError, reduce_state


class TestReduceState(TestCase):
  def test_reset(self):
    state = LifecycleState('fulfilled', 'foo', True)
    self.assertIs(reduce_state(state, Action.reset()), NONE_STATE)
    self.assertEqual(NONE_STATE, LifecycleState('none', None, None))

  def test_pending_clears_value(self):
    state = LifecycleState('fulfilled', 'foo', True)
    self.assertEqual(reduce_state(state, Action.pending(False)), LifecycleState('pending', None, False))

  def test_settled_keeps_threshold_flag(self):
    within = LifecycleState('pending', None, True)
    outside = LifecycleState('pending', None, False)
    error = Exception('foo')

    self.assertEqual(reduce_state(within, Action.fulfilled('foo')), LifecycleState('fulfilled', 'foo', True))
    self.assertEqual(reduce_state(outside, Action.fulfilled('foo')), LifecycleState('fulfilled', 'foo', False))
    self.assertEqual(reduce_state(within, Action.rejected(error)), LifecycleState('rejected', error, True))

  def test_equal_state_is_reused(self):
    pending = LifecycleState('pending', None, False)
    fulfilled = LifecycleState('fulfilled', 'foo', False)
    none = LifecycleState('none')

    self.assertIs(reduce_state(pending, Action.pending(False)), pending)
    self.assertIs(reduce_state(fulfilled, Action.fulfilled('foo')), fulfilled)
    self.assertIs(reduce_state(none, Action.reset()), none)
    self.assertIsNot(reduce_state(pending, Action.pending(True)), pending)

  def test_unknown_action(self):
    with self.assertRaises(UnknownActionError):
      reduce_state(NONE_STATE, Action('cancelled'))  # type: ignore

  def test_settled(self):
    self.assertFalse(NONE_STATE.settled())
    self.assertFalse(LifecycleState('pending', None, True).settled())
    self.assertTrue(LifecycleState('fulfilled', 'foo', True).settled())
    self.assertTrue(LifecycleState('rejected', Exception(), False).settled())
