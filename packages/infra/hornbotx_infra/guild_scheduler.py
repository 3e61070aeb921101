from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Awaitable, Callable
import logging

from hornbotx_core.ports.play_queue import PlayQueue, PlayRequest
from hornbotx_core.ports.voice import (
    VoiceConnectError,
    VoiceConnection,
    VoiceGateway,
    VoiceTransportError,
)
from hornbotx_core.sounds import Clip


logger = logging.getLogger(__name__)

DEFAULT_MAX_QUEUE_SIZE = 6
DEFAULT_SWITCH_SETTLE_MS = 125
DEFAULT_LEAD_IN_MS = 32


class GuildPlaybackScheduler(PlayQueue):
    """
    One bounded FIFO queue and one worker task per guild with pending plays.

    - enqueue creates the guild queue and spawns its worker when none exists,
      otherwise appends (or drops the play when the queue is full).
    - The worker owns the guild's voice connection, plays requests in order,
      and disconnects once the queue runs dry.
    - A failed join or send discards the plays pending at that moment. Plays
      enqueued afterwards start over on a fresh connection.
    - The lock only guards the queue map; joins, channel moves, frame sends and
      sleeps all happen outside it.
    """

    def __init__(
        self,
        *,
        voice_gateway: VoiceGateway,
        max_queue_size: int = DEFAULT_MAX_QUEUE_SIZE,
        switch_settle_ms: int = DEFAULT_SWITCH_SETTLE_MS,
        lead_in_ms: int = DEFAULT_LEAD_IN_MS,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        if max_queue_size < 1:
            raise ValueError("max_queue_size must be at least 1")
        self._gateway = voice_gateway
        self._max_queue_size = max_queue_size
        self._switch_settle = switch_settle_ms / 1000
        self._lead_in = lead_in_ms / 1000
        self._sleep = sleep or asyncio.sleep
        self._lock = asyncio.Lock()
        self._queues: dict[int, deque[PlayRequest]] = {}
        self._workers: dict[int, asyncio.Task[None]] = {}

    async def enqueue(self, request: PlayRequest) -> bool:
        guild_id = request.guild_id
        async with self._lock:
            queue = self._queues.get(guild_id)
            if queue is None:
                self._queues[guild_id] = deque([request])
                self._workers[guild_id] = asyncio.create_task(
                    self._run_worker(guild_id),
                    name=f"guild-player-{guild_id}",
                )
                return True

            if len(queue) >= self._max_queue_size:
                logger.debug("Queue full for guild %s, dropping %s", guild_id, request.clip.name)
                return False

            queue.append(request)
            return True

    def queue_exists(self, guild_id: int) -> bool:
        return guild_id in self._queues

    def pending(self, guild_id: int) -> int:
        queue = self._queues.get(guild_id)
        return len(queue) if queue is not None else 0

    async def wait_until_idle(self, guild_id: int) -> None:
        task = self._workers.get(guild_id)
        if task is not None:
            await asyncio.wait({task})

    async def close(self) -> None:
        """Cancel every worker. Queued and in-flight plays are abandoned."""
        tasks = list(self._workers.values())
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._queues.clear()
        self._workers.clear()

    # -----------------------------
    # Worker
    # -----------------------------
    async def _run_worker(self, guild_id: int) -> None:
        connection: VoiceConnection | None = None
        while True:
            try:
                request = await self._next_request(guild_id)
                if request is None:
                    if connection is not None:
                        await self._disconnect(guild_id, connection)
                        connection = None
                    # Plays may have arrived while we were disconnecting.
                    if await self._retire(guild_id):
                        return
                    continue

                if connection is not None and not connection.is_ready():
                    await self._disconnect(guild_id, connection)
                    connection = None

                if connection is None:
                    connection = await self._gateway.join(
                        guild_id=guild_id,
                        channel_id=request.channel_id,
                    )
                elif connection.channel_id != request.channel_id:
                    await connection.switch_channel(request.channel_id)
                    await self._sleep(self._switch_settle)

                await self._play(request, connection)
            except (VoiceConnectError, VoiceTransportError) as exc:
                logger.error("Playback failed in guild %s: %s", guild_id, exc)
                await self._recover(guild_id, connection)
                connection = None
            except Exception:
                logger.exception("Unexpected error in player for guild %s", guild_id)
                await self._recover(guild_id, connection)
                connection = None

    async def _next_request(self, guild_id: int) -> PlayRequest | None:
        async with self._lock:
            queue = self._queues.get(guild_id)
            if queue:
                return queue.popleft()
            return None

    async def _retire(self, guild_id: int) -> bool:
        async with self._lock:
            if self._queues.get(guild_id):
                return False
            self._queues.pop(guild_id, None)
            self._workers.pop(guild_id, None)
            return True

    async def _recover(self, guild_id: int, connection: VoiceConnection | None) -> None:
        # Plays enqueued after this point survive and get a fresh join.
        await self._discard_pending(guild_id)
        if connection is not None:
            await self._disconnect(guild_id, connection)

    async def _discard_pending(self, guild_id: int) -> None:
        async with self._lock:
            queue = self._queues.get(guild_id)
            dropped = len(queue) if queue else 0
            if queue:
                queue.clear()
        if dropped:
            logger.warning("Discarded %s queued plays for guild %s", dropped, guild_id)

    async def _disconnect(self, guild_id: int, connection: VoiceConnection) -> None:
        try:
            await connection.disconnect()
        except Exception as exc:
            logger.warning("Failed to disconnect voice in guild %s: %s", guild_id, exc)

    async def _play(self, request: PlayRequest, connection: VoiceConnection) -> None:
        await self._sleep(self._lead_in)

        # Chained follow-ups play inline, never through the queue.
        for play in request.sequence():
            logger.debug(
                "Playing %s in guild %s channel %s (explicit=%s)",
                play.clip.name,
                play.guild_id,
                play.channel_id,
                play.explicit,
            )
            await self._stream(play.clip, connection)

        await self._sleep(request.clip.post_delay_ms / 1000)

    async def _stream(self, clip: Clip, connection: VoiceConnection) -> None:
        await connection.set_speaking(True)
        try:
            for frame in clip.frames:
                await connection.send_frame(frame)
        finally:
            await connection.set_speaking(False)
