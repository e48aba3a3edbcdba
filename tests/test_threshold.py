import asyncio
from unittest import IsolatedAsyncioTestCase

from aiostatus import Action, ManualScheduler, StateCache, track_future

from . import flush


class TestTrackFuture(IsolatedAsyncioTestCase):
  def track(self, future, **kwargs):
    actions = list[Action]()
    scheduler = ManualScheduler()
    cancel = track_future(future, dispatch=actions.append, scheduler=scheduler, **kwargs)

    return actions, scheduler, cancel

  async def test_no_future(self):
    actions, scheduler, cancel = self.track(None, threshold=1)

    self.assertEqual(actions, [Action.reset()])
    self.assertEqual(scheduler.pending_count, 0)
    cancel()

  async def test_no_threshold(self):
    future = asyncio.get_running_loop().create_future()
    actions, scheduler, _ = self.track(future, threshold=0)

    self.assertEqual(actions, [Action.pending(False)])
    self.assertEqual(scheduler.pending_count, 0)

    future.set_result('foo')
    await flush()

    self.assertEqual(actions, [Action.pending(False), Action.fulfilled('foo')])

  async def test_settled_within_threshold(self):
    future = asyncio.get_running_loop().create_future()
    actions, scheduler, _ = self.track(future, threshold=1)

    self.assertEqual(actions, [Action.pending(True)])
    self.assertEqual(scheduler.pending_count, 1)

    future.set_result('foo')
    await flush()

    self.assertEqual(scheduler.pending_count, 0)
    scheduler.advance(2)

    self.assertEqual(actions, [Action.pending(True), Action.fulfilled('foo')])

  async def test_settled_after_threshold(self):
    error = Exception('foo')
    future = asyncio.get_running_loop().create_future()
    actions, scheduler, _ = self.track(future, threshold=1)

    scheduler.advance(1)
    self.assertEqual(actions, [Action.pending(True), Action.pending(False)])

    future.set_exception(error)
    await flush()

    self.assertEqual(actions, [Action.pending(True), Action.pending(False), Action.rejected(error)])

  async def test_cancel(self):
    future = asyncio.get_running_loop().create_future()
    actions, scheduler, cancel = self.track(future, threshold=1)

    cancel()
    cancel()

    self.assertEqual(scheduler.pending_count, 0)

    scheduler.advance(2)
    future.set_result('foo')
    await flush()

    self.assertEqual(actions, [Action.pending(True)])

  async def test_already_settled(self):
    future = asyncio.get_running_loop().create_future()
    future.set_result('foo')

    actions, scheduler, _ = self.track(future, threshold=1, settled=True)

    self.assertEqual(actions, [])
    self.assertEqual(scheduler.pending_count, 0)

    await flush()
    self.assertEqual(actions, [Action.fulfilled('foo')])

  async def test_cache(self):
    cache = StateCache()
    future = asyncio.get_running_loop().create_future()
    self.track(future, cache=cache, threshold=0)

    self.assertEqual(cache.read(future).status, 'pending')

    future.set_result('foo')
    await flush()

    self.assertEqual(cache.read(future).status, 'fulfilled')

  async def test_reset_delay(self):
    future = asyncio.get_running_loop().create_future()
    actions, scheduler, _ = self.track(future, reset_delay={'fulfilled': 2}, threshold=0)

    future.set_result('foo')
    await flush()

    scheduler.advance(1)
    self.assertEqual(actions, [Action.pending(False), Action.fulfilled('foo')])

    scheduler.advance(1)
    self.assertEqual(actions, [Action.pending(False), Action.fulfilled('foo'), Action.reset()])

  async def test_reset_delay_within_threshold(self):
    future = asyncio.get_running_loop().create_future()
    actions, scheduler, _ = self.track(future, reset_delay={'fulfilled': 5, 'fulfilled_within_threshold': 1}, threshold=3)

    future.set_result('foo')
    await flush()

    scheduler.advance(1)
    self.assertEqual(actions, [Action.pending(True), Action.fulfilled('foo'), Action.reset()])

  async def test_reset_delay_cancelled(self):
    future = asyncio.get_running_loop().create_future()
    actions, scheduler, cancel = self.track(future, reset_delay=1, threshold=0)

    future.set_result('foo')
    await flush()

    self.assertEqual(scheduler.pending_count, 1)
    cancel()
    scheduler.advance(2)

    self.assertEqual(actions, [Action.pending(False), Action.fulfilled('foo')])
