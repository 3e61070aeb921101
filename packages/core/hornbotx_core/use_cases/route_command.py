# packages/core/hornbotx_core/use_cases/route_command.py
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from hornbotx_core.sounds import Clip, SoundCollection


@dataclass(frozen=True)
class RoutedCommand:
    collection: SoundCollection
    clip: Clip | None = None


class CommandRouter:
    """
    Map chat text such as "!airhorn" or "!airhorn reverb" to a collection and
    an optional explicitly named clip.

    Anything that does not resolve (no sigil, unknown trigger, unknown clip name)
    routes to None and is meant to be ignored silently.
    """

    def __init__(self, collections: Iterable[SoundCollection], *, sigil: str = "!") -> None:
        if not sigil:
            raise ValueError("command sigil must not be empty")
        self._sigil = sigil
        self._by_trigger: dict[str, SoundCollection] = {}

        for collection in collections:
            for trigger in collection.commands:
                owner = self._by_trigger.get(trigger)
                if owner is not None and owner is not collection:
                    raise ValueError(
                        f"Trigger {trigger!r} is used by both {owner.prefix!r} and {collection.prefix!r}"
                    )
                self._by_trigger[trigger] = collection

    def route(self, text: str) -> RoutedCommand | None:
        if not text or not text.startswith(self._sigil):
            return None

        parts = text.lower().split()
        if not parts:
            return None

        collection = self._by_trigger.get(parts[0])
        if collection is None:
            return None

        if len(parts) == 1:
            return RoutedCommand(collection=collection)

        clip = collection.clip_named(parts[1])
        if clip is None:
            return None
        return RoutedCommand(collection=collection, clip=clip)
