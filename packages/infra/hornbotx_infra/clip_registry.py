from __future__ import annotations

from collections.abc import Iterable
import logging
from pathlib import Path

from hornbotx_core.sounds import Clip, ClipSpec, CollectionSpec, SoundCollection
from hornbotx_infra.dca import ClipLoadError, DcaReader


logger = logging.getLogger(__name__)


class ClipRegistry:
    """
    Loads every declared collection into memory once, at startup.

    A clip whose file cannot be read is logged and left out of its collection,
    so it is never picked and its weight does not count.
    """

    def __init__(self, *, audio_dir: Path, reader: DcaReader | None = None) -> None:
        self._audio_dir = audio_dir
        self._reader = reader or DcaReader()
        self._collections: dict[str, SoundCollection] = {}

    @property
    def collections(self) -> list[SoundCollection]:
        return list(self._collections.values())

    def get(self, prefix: str) -> SoundCollection | None:
        return self._collections.get(prefix)

    def clip_path(self, *, prefix: str, clip_name: str) -> Path:
        return self._audio_dir / f"{prefix}_{clip_name}.dca"

    def load(self, specs: Iterable[CollectionSpec]) -> list[SoundCollection]:
        specs = list(specs)
        by_prefix = {spec.prefix: spec for spec in specs}
        for spec in specs:
            if spec.chain_with is None:
                continue
            target = by_prefix.get(spec.chain_with)
            if target is None:
                raise ValueError(f"Collection {spec.prefix!r} chains with unknown collection {spec.chain_with!r}")
            # Chains are one level deep: a chain target never chains itself.
            if target.chain_with is not None:
                raise ValueError(f"Collection {spec.prefix!r} chains with {target.prefix!r}, which chains again")

        loaded = {spec.prefix: self._load_clips(spec) for spec in specs}

        # Chain targets first, so chaining collections can reference them.
        built: dict[str, SoundCollection] = {}
        for spec in sorted(specs, key=lambda s: s.chain_with is not None):
            built[spec.prefix] = SoundCollection(
                prefix=spec.prefix,
                commands=spec.commands,
                clips=loaded[spec.prefix],
                chain_with=built[spec.chain_with] if spec.chain_with is not None else None,
            )

        self._collections = {spec.prefix: built[spec.prefix] for spec in specs}
        clip_count = sum(len(collection.clips) for collection in self._collections.values())
        logger.info("Loaded %s clips in %s collections from %s", clip_count, len(self._collections), self._audio_dir)
        return self.collections

    def _load_clips(self, spec: CollectionSpec) -> tuple[Clip, ...]:
        clips: list[Clip] = []
        for clip_spec in spec.clips:
            clip = self._load_clip(spec.prefix, clip_spec)
            if clip is not None:
                clips.append(clip)
        return tuple(clips)

    def _load_clip(self, prefix: str, spec: ClipSpec) -> Clip | None:
        path = self.clip_path(prefix=prefix, clip_name=spec.name)
        try:
            frames = self._reader.read_frames(path)
        except ClipLoadError as exc:
            logger.warning("Skipping clip %s/%s: %s", prefix, spec.name, exc)
            return None

        if not frames:
            logger.warning("Skipping clip %s/%s: %s holds no frames", prefix, spec.name, path)
            return None

        return Clip(
            name=spec.name,
            weight=spec.weight,
            post_delay_ms=spec.post_delay_ms,
            frames=frames,
        )
