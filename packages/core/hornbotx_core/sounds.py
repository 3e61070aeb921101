# packages/core/hornbotx_core/sounds.py
from __future__ import annotations

from dataclasses import dataclass, field
import random

from hornbotx_core.selection import WeightedPicker


@dataclass(frozen=True)
class ClipSpec:
    """
    Static declaration of a clip, before its audio is loaded.
    """
    name: str
    weight: int
    post_delay_ms: int = 250


@dataclass(frozen=True)
class CollectionSpec:
    """
    Static declaration of a collection of clips.

    Clip files are looked up as "<prefix>_<clip name>". ``chain_with`` names the
    prefix of another collection whose clip plays right after this one.
    """
    prefix: str
    commands: tuple[str, ...]
    clips: tuple[ClipSpec, ...]
    chain_with: str | None = None


@dataclass(frozen=True)
class Clip:
    """
    A loaded clip: an ordered sequence of pre-encoded Opus frames.
    """
    name: str
    weight: int
    post_delay_ms: int
    frames: tuple[bytes, ...] = field(repr=False)


class SoundCollection:
    """
    A loaded, immutable group of clips sharing a command namespace.
    """

    def __init__(
        self,
        *,
        prefix: str,
        commands: tuple[str, ...],
        clips: tuple[Clip, ...],
        chain_with: SoundCollection | None = None,
    ) -> None:
        self.prefix = prefix
        self.commands = tuple(command.lower() for command in commands)
        self.clips = clips
        self.chain_with = chain_with
        self._by_name = {clip.name: clip for clip in clips}
        self._picker = WeightedPicker(clips, [clip.weight for clip in clips])

    def __repr__(self) -> str:
        return f"SoundCollection(prefix={self.prefix!r}, clips={len(self.clips)})"

    @property
    def total_weight(self) -> int:
        return self._picker.total_weight

    def clip_named(self, name: str) -> Clip | None:
        return self._by_name.get(name)

    def random(self, rng: random.Random | None = None) -> Clip | None:
        return self._picker.pick(rng)

    def resolve_chain(self, rng: random.Random | None = None) -> Clip | None:
        if self.chain_with is None:
            return None
        return self.chain_with.random(rng)
