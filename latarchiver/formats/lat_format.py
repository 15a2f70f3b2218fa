from ..core.archive import ArchiveFormat
from .accelerated import AcceleratedCompressor


class LatCompressor(AcceleratedCompressor):
    format = ArchiveFormat.LAT
    label = ".lat"
    compress_stages = (
        "parallel match finding",
        "optimal parsing",
        "rANS encoding",
    )
