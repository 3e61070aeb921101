from __future__ import annotations

from dataclasses import dataclass

from hornbotx_core.sounds import Clip


@dataclass(frozen=True)
class PlayRequest:
    """
    One resolved play, ready for a guild queue.

    ``next`` is the chained follow-up played inline on the same connection;
    it always targets the same guild and channel as its parent.
    ``explicit`` records whether the clip was named by the user (logging only).
    """
    guild_id: int
    channel_id: int
    clip: Clip
    next: PlayRequest | None = None
    explicit: bool = False

    def __post_init__(self) -> None:
        if self.next is not None and self.next.guild_id != self.guild_id:
            raise ValueError("chained play must target the same guild as its parent")

    def sequence(self) -> list[PlayRequest]:
        """Return this play followed by its chained follow-ups, in play order."""
        ordered: list[PlayRequest] = []
        current: PlayRequest | None = self
        while current is not None:
            ordered.append(current)
            current = current.next
        return ordered


class PlayQueue:
    """
    Port interface: per-guild playback queue.
    """

    async def enqueue(self, request: PlayRequest) -> bool:
        """Queue a play. Returns False when the guild queue is full and the play was dropped."""
        raise NotImplementedError
