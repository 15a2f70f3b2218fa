"""LatArchiver: archive codecs, GPU accelerator selection and password envelopes."""

import logging

from .core.archive import ArchiveEntry, ArchiveFormat, CompressionOptions, GpuBackend, PasswordMode
from .core.encrypt import decrypt_bytes, encrypt_bytes
from .core.registry import CodecRegistry, build_registry

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ArchiveEntry",
    "ArchiveFormat",
    "CodecRegistry",
    "CompressionOptions",
    "GpuBackend",
    "PasswordMode",
    "build_registry",
    "decrypt_bytes",
    "encrypt_bytes",
]
