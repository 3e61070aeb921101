# packages/core/hornbotx_core/ports/voice.py
from __future__ import annotations

from dataclasses import dataclass


class VoiceConnectError(RuntimeError):
    """Joining or authenticating a voice channel failed."""


class VoiceTransportError(RuntimeError):
    """Sending audio over an established voice connection failed."""


@dataclass(frozen=True)
class VoicePresence:
    user_id: int
    channel_id: int


@dataclass(frozen=True)
class GuildVoiceState:
    """
    Snapshot of who is sitting in which voice channel of a guild.
    """
    guild_id: int
    afk_channel_id: int | None
    presences: tuple[VoicePresence, ...]

    def channel_of(self, user_id: int) -> int | None:
        for presence in self.presences:
            if presence.user_id == user_id:
                return presence.channel_id
        return None


class VoiceConnection:
    """
    Port interface: one live voice connection inside a guild.
    """

    @property
    def channel_id(self) -> int:
        raise NotImplementedError

    def is_ready(self) -> bool:
        raise NotImplementedError

    async def switch_channel(self, channel_id: int) -> None:
        raise NotImplementedError

    async def set_speaking(self, speaking: bool) -> None:
        raise NotImplementedError

    async def send_frame(self, frame: bytes) -> None:
        """
        Send one pre-encoded Opus frame. May block until the transport is ready
        for the next frame. Raises VoiceTransportError on failure.
        """
        raise NotImplementedError

    async def disconnect(self) -> None:
        raise NotImplementedError


class VoiceGateway:
    """
    Port interface: opens voice connections. Raises VoiceConnectError on failure.
    """

    async def join(self, *, guild_id: int, channel_id: int) -> VoiceConnection:
        raise NotImplementedError


class GuildDirectory:
    """
    Port interface: looks up the cached voice state of a guild.
    """

    def voice_state(self, guild_id: int) -> GuildVoiceState | None:
        raise NotImplementedError
