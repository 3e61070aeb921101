# packages/core/hornbotx_core/use_cases/play_command.py
from __future__ import annotations

from dataclasses import dataclass
import logging

from hornbotx_core.ports.play_queue import PlayQueue, PlayRequest
from hornbotx_core.ports.voice import GuildDirectory
from hornbotx_core.use_cases.build_play_request import PlayRequestBuilder
from hornbotx_core.use_cases.route_command import CommandRouter


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlayCommandInput:
    guild_id: int
    channel_id: int
    message_id: int
    author_id: int
    content: str


@dataclass(frozen=True)
class PlayCommandResult:
    request: PlayRequest
    queued: bool


class PlayCommand:
    """
    Core use-case: a chat message that may be a sound command.

    Flow:
    - Route the text to a collection (+ optional clip) -> CommandRouter
    - Look up the author's voice channel -> GuildDirectory port (discord cache in the bot)
    - Resolve the play (random pick, chaining) -> PlayRequestBuilder
    - Hand it to the guild queue -> PlayQueue port (scheduler in infra)

    Returns None whenever the message does not lead to a play. Nothing here
    waits for audio; enqueue only holds the scheduler lock briefly.
    """

    def __init__(
        self,
        *,
        router: CommandRouter,
        builder: PlayRequestBuilder,
        guilds: GuildDirectory,
        play_queue: PlayQueue,
    ) -> None:
        self._router = router
        self._builder = builder
        self._guilds = guilds
        self._play_queue = play_queue

    async def execute(self, data: PlayCommandInput) -> PlayCommandResult | None:
        routed = self._router.route(data.content)
        if routed is None:
            return None

        guild = self._guilds.voice_state(data.guild_id)
        if guild is None:
            logger.warning(
                "Failed to grab guild %s (channel=%s message=%s)",
                data.guild_id,
                data.channel_id,
                data.message_id,
            )
            return None

        request = self._builder.build(
            user_id=data.author_id,
            guild=guild,
            collection=routed.collection,
            clip=routed.clip,
        )
        if request is None:
            return None

        queued = await self._play_queue.enqueue(request)
        logger.debug(
            "Play %s/%s for user %s in guild %s (explicit=%s queued=%s)",
            routed.collection.prefix,
            request.clip.name,
            data.author_id,
            data.guild_id,
            request.explicit,
            queued,
        )
        return PlayCommandResult(request=request, queued=queued)
