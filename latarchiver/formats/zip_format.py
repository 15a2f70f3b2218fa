import io
import logging
import zipfile
import zlib
from typing import Optional, Sequence

from ..core.archive import ArchiveEntry, ArchiveFormat, PasswordMode
from ..core.encrypt import Password
from ..core.errors import CodecError, PasswordUnsupportedError

logger = logging.getLogger(__name__)

_READ_ERRORS = (
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
    zlib.error,
    EOFError,
    OSError,
    ValueError,
    NotImplementedError,
    RuntimeError,  # member is ZipCrypto-encrypted
)


class ZipCompressor:
    """Deflate ZIP archives. Passwords are applied by the registry through the envelope."""

    format = ArchiveFormat.ZIP
    password_mode = PasswordMode.ENVELOPE

    def __init__(self, level: int = 6):
        self.level = max(0, min(int(level), 9))

    def compress(self, entries: Sequence[ArchiveEntry], password: Optional[Password] = None) -> bytes:
        if password is not None:
            raise PasswordUnsupportedError("ZIP codec cannot write encrypted archives")

        buf = io.BytesIO()
        try:
            with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=self.level) as archive:
                for entry in entries:
                    archive.writestr(entry.name, entry.data)
        except (zipfile.LargeZipFile, ValueError, OSError) as exc:
            raise CodecError(f"Failed to write ZIP archive: {exc}") from exc
        return buf.getvalue()

    def decompress(self, data: bytes, password: Optional[Password] = None) -> list[ArchiveEntry]:
        if password is not None:
            raise PasswordUnsupportedError("ZIP codec cannot read encrypted archives")

        try:
            with zipfile.ZipFile(io.BytesIO(data)) as archive:
                entries = [
                    ArchiveEntry(name=info.filename, data=archive.read(info))
                    for info in archive.infolist()
                    if not info.is_dir()
                ]
        except _READ_ERRORS as exc:
            raise CodecError(f"Invalid ZIP archive: {exc}") from exc

        logger.debug("Read %d entries from ZIP archive", len(entries))
        return entries
