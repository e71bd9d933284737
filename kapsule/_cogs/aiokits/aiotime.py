import asyncio
from typing import Optional


async def sleep(
        delay: Optional[float],
        wakeup: Optional[asyncio.Event] = None,
) -> Optional[float]:
    """
    Sleep for the delay, but wake up early if the event is set meanwhile.

    Returns the number of seconds left unslept if woken up by the event,
    or ``None`` if the sleep was not interrupted and reached its full delay.
    An event that is already set wakes the sleep immediately (the whole delay
    is left unslept), so that the callers can check it right after.

    Zero, negative, and ``None`` delays do not sleep at all.
    """
    if delay is None or delay <= 0:
        return None

    # The loop's time, not the wall-clock: it can be faked in tests.
    loop = asyncio.get_running_loop()
    awakening_event = wakeup if wakeup is not None else asyncio.Event()
    started = loop.time()
    try:
        await asyncio.wait_for(awakening_event.wait(), timeout=delay)
    except asyncio.TimeoutError:
        return None
    else:
        return max(0.0, delay - (loop.time() - started))
