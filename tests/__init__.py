import asyncio


async def flush(iterations: int = 5):
  """
  Let the event loop run pending callbacks, such as future done callbacks.
  """

  for _ in range(iterations):
    await asyncio.sleep(0)
