"""Echo scheduler — recurring broadcast of a fixed message into a group.

At most one echo job is live per group. Starting a new echo for a group
cancels the previous timer and installs the new one under the group's
lock, with no suspension point in between, so two timers never run for
the same group.

Jobs live in memory only; a restart loses them.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

from .communication import messages
from .communication.platform import MessagingPlatform
from .errors import DeliveryError, ValidationError
from .registry import KeyedLocks

logger = logging.getLogger("yummyecho.echo")

# Seconds in one echo "minute". Tests shrink this.
_MINUTE_SECONDS = 60.0


@dataclass
class EchoJob:
    group_id: int
    message: str
    interval_minutes: int
    task: Optional[asyncio.Task] = field(default=None, repr=False)
    ticks: int = 0


def parse_echo_args(raw: str) -> tuple[int, str]:
    """Parse the text after '/eco': '<minutes> <message...>'.

    The message keeps its newlines and inner spacing.

    Returns:
        Tuple of (interval_minutes, message)

    Raises:
        ValidationError: Missing arguments, non-numeric or < 1 interval.
    """
    parts = (raw or "").split(maxsplit=1)
    if len(parts) < 2:
        raise ValidationError("echo needs interval and message", reply=messages.ECHO_USAGE)
    raw_minutes, message = parts
    try:
        minutes = int(raw_minutes)
    except ValueError:
        raise ValidationError(f"non-numeric interval {raw_minutes!r}", reply=messages.ECHO_BAD_INTERVAL)
    if minutes < 1:
        raise ValidationError(f"interval {minutes} < 1", reply=messages.ECHO_BAD_INTERVAL)
    return minutes, message.rstrip()


class EchoScheduler:
    """Per-group recurring echo timers.

    Usage:
        echoes = EchoScheduler(platform)
        await echoes.start(group_id, 5, "Hola")
        # ... later ...
        await echoes.stop(group_id)
    """

    def __init__(self, platform: MessagingPlatform, minute_seconds: float = _MINUTE_SECONDS):
        """Initialize scheduler.

        Args:
            platform: Used to deliver each tick
            minute_seconds: Length of one interval minute in seconds
        """
        self._platform = platform
        self._minute_seconds = minute_seconds
        self._jobs: dict[int, EchoJob] = {}
        self._locks = KeyedLocks()

    def get(self, group_id: int) -> Optional[EchoJob]:
        return self._jobs.get(group_id)

    @property
    def active_count(self) -> int:
        return len(self._jobs)

    async def start(self, group_id: int, interval_minutes: int, message: str) -> EchoJob:
        """Install (or replace) the echo job for a group.

        Raises:
            ValidationError: interval_minutes < 1
        """
        if interval_minutes < 1:
            raise ValidationError(f"interval {interval_minutes} < 1", reply=messages.ECHO_BAD_INTERVAL)

        async with self._locks.hold(group_id):
            previous = self._jobs.pop(group_id, None)
            if previous and previous.task:
                previous.task.cancel()
            job = EchoJob(group_id=group_id, message=message, interval_minutes=interval_minutes)
            job.task = asyncio.create_task(self._run(job), name=f"echo:{group_id}")
            self._jobs[group_id] = job

        if previous:
            logger.info(
                f"Echo replaced in group {group_id}: "
                f"{previous.interval_minutes}min -> {interval_minutes}min"
            )
        else:
            logger.info(f"Echo started in group {group_id} every {interval_minutes}min")
        return job

    async def stop(self, group_id: int) -> bool:
        """Cancel and forget the group's echo job.

        Returns:
            True if a job was stopped, False if none was active
        """
        async with self._locks.hold(group_id):
            job = self._jobs.pop(group_id, None)
            if job is None:
                return False
            if job.task:
                job.task.cancel()
        logger.info(f"Echo stopped in group {group_id} after {job.ticks} tick(s)")
        return True

    async def stop_all(self):
        """Cancel every job (shutdown)."""
        for group_id in list(self._jobs):
            await self.stop(group_id)

    async def _run(self, job: EchoJob):
        """Tick loop for one job. Delivery failures never end the job."""
        interval = job.interval_minutes * self._minute_seconds
        text = messages.ECHO_TICK.format(message=job.message)
        while True:
            await asyncio.sleep(interval)
            job.ticks += 1
            try:
                await self._platform.send_text(job.group_id, text)
            except DeliveryError as e:
                logger.warning(f"Echo tick {job.ticks} to group {job.group_id} not delivered: {e}")
            except Exception as e:
                logger.error(f"Echo tick error in group {job.group_id}: {e}", exc_info=True)
