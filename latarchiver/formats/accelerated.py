import logging
from typing import Optional, Sequence

from ..core.accelerator import GpuAccelerator
from ..core.archive import ArchiveEntry, ArchiveFormat, PasswordMode
from ..core.encrypt import Password
from ..core.errors import AcceleratorUnavailableError, CodecNotImplementedError

logger = logging.getLogger(__name__)


class AcceleratedCompressor:
    """
    Base for formats whose pipeline only runs on a GPU accelerator.

    These codecs never emit placeholder archives: without an accelerator they
    raise AcceleratorUnavailableError, and stages that are not built yet raise
    CodecNotImplementedError.
    """

    format: ArchiveFormat
    password_mode = PasswordMode.ENVELOPE
    label = ""
    compress_stages: tuple[str, ...] = ()

    def __init__(self, accelerator: Optional[GpuAccelerator] = None):
        self.accelerator = accelerator

    def _require_accelerator(self) -> GpuAccelerator:
        if self.accelerator is None:
            raise AcceleratorUnavailableError(f"GPU accelerator required for {self.label}")
        return self.accelerator

    def compress(self, entries: Sequence[ArchiveEntry], password: Optional[Password] = None) -> bytes:
        accelerator = self._require_accelerator()
        logger.info(
            "Compressing %d entries with %s using %s",
            len(entries),
            self.label,
            accelerator.name,
        )
        raise CodecNotImplementedError(
            f"{self.label} compression is not implemented (pipeline: {', '.join(self.compress_stages)})"
        )

    def decompress(self, data: bytes, password: Optional[Password] = None) -> list[ArchiveEntry]:
        self._require_accelerator()
        raise CodecNotImplementedError(f"{self.label} decompression is not implemented")
