from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional, Protocol, Sequence, Union

if TYPE_CHECKING:
    from .encrypt import Password


@dataclass(frozen=True)
class ArchiveEntry:
    """A named blob inside an archive. The name doubles as the extraction path."""
    name: str
    data: bytes


class ArchiveFormat(Enum):
    ZIP = "zip"
    SEVENZ = "7z"
    LAT = "lat"
    PAQG = "paqg"

    @property
    def extension(self) -> str:
        return f".{self.value}"

    @classmethod
    def parse(cls, value: Union[str, "ArchiveFormat"]) -> "ArchiveFormat":
        if isinstance(value, cls):
            return value
        token = str(value).strip().lower().lstrip(".")
        for fmt in cls:
            if fmt.value == token:
                return fmt
        raise ValueError(f"Unknown archive format: {value!r}")


class PasswordMode(Enum):
    NATIVE = "native"
    ENVELOPE = "envelope"
    UNSUPPORTED = "unsupported"


class GpuBackend(Enum):
    AUTO = "auto"
    CUDA = "cuda"
    VULKAN = "vulkan"
    NONE = "none"


@dataclass
class CompressionOptions:
    level: int = 6
    backend: GpuBackend = GpuBackend.AUTO
    password: Optional["Password"] = None

    def __post_init__(self) -> None:
        self.level = max(0, min(int(self.level), 9))
        if not isinstance(self.backend, GpuBackend):
            self.backend = GpuBackend(self.backend)

    def __repr__(self) -> str:
        return (
            f"CompressionOptions(level={self.level}, backend={self.backend.value}, "
            f"password={'set' if self.password is not None else None})"
        )


class Compressor(Protocol):
    format: ArchiveFormat
    password_mode: PasswordMode

    def compress(
        self,
        entries: Sequence[ArchiveEntry],
        password: Optional["Password"] = None,
    ) -> bytes: ...

    def decompress(
        self,
        data: bytes,
        password: Optional["Password"] = None,
    ) -> list[ArchiveEntry]: ...
