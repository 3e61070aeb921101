# packages/core/hornbotx_core/use_cases/build_play_request.py
from __future__ import annotations

import logging
import random

from hornbotx_core.ports.play_queue import PlayRequest
from hornbotx_core.ports.voice import GuildVoiceState
from hornbotx_core.sounds import Clip, SoundCollection


logger = logging.getLogger(__name__)


class PlayRequestBuilder:
    """
    Turn (user, guild, collection, optional clip) into a fully resolved PlayRequest.

    Returns None when there is nothing to do:
    - the user is not in a voice channel of the guild
    - the user sits in the guild's AFK channel
    - the collection has no playable clips
    """

    def __init__(self, *, rng: random.Random | None = None) -> None:
        self._rng = rng

    def build(
        self,
        *,
        user_id: int,
        guild: GuildVoiceState,
        collection: SoundCollection,
        clip: Clip | None = None,
    ) -> PlayRequest | None:
        channel_id = guild.channel_of(user_id)
        if channel_id is None:
            logger.debug("User %s is not in a voice channel of guild %s", user_id, guild.guild_id)
            return None

        if guild.afk_channel_id is not None and channel_id == guild.afk_channel_id:
            logger.debug("Not playing into AFK channel %s of guild %s", channel_id, guild.guild_id)
            return None

        explicit = clip is not None
        if clip is None:
            clip = collection.random(self._rng)
            if clip is None:
                logger.warning("Collection %s has no playable clips", collection.prefix)
                return None

        follow_up = None
        chained = collection.resolve_chain(self._rng)
        if chained is not None:
            follow_up = PlayRequest(
                guild_id=guild.guild_id,
                channel_id=channel_id,
                clip=chained,
                explicit=explicit,
            )

        return PlayRequest(
            guild_id=guild.guild_id,
            channel_id=channel_id,
            clip=clip,
            next=follow_up,
            explicit=explicit,
        )
