from .lat_format import LatCompressor
from .paqg_format import PaqgCompressor
from .sevenz_format import SevenZCompressor
from .zip_format import ZipCompressor

__all__ = ["LatCompressor", "PaqgCompressor", "SevenZCompressor", "ZipCompressor"]
