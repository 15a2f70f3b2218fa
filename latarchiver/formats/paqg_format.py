from ..core.archive import ArchiveFormat
from .accelerated import AcceleratedCompressor


class PaqgCompressor(AcceleratedCompressor):
    format = ArchiveFormat.PAQG
    label = "PAQG"
    compress_stages = (
        "context preparation",
        "probability mixing",
        "arithmetic coding",
    )
