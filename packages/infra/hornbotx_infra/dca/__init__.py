from hornbotx_infra.dca.reader import MAX_FRAME_BYTES, ClipLoadError, DcaReader, read_frames

__all__ = [
    "ClipLoadError",
    "DcaReader",
    "MAX_FRAME_BYTES",
    "read_frames",
]
