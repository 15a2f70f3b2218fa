import io
import logging
from typing import Optional, Sequence

import py7zr
from py7zr.exceptions import ArchiveError as SevenZipArchiveError

from ..core.archive import ArchiveEntry, ArchiveFormat, PasswordMode
from ..core.encrypt import Password
from ..core.errors import CodecError, PasswordUnsupportedError

logger = logging.getLogger(__name__)


def _password_str(password: Optional[Password]) -> Optional[str]:
    if password is None:
        return None
    if isinstance(password, str):
        secret = password
    else:
        try:
            secret = bytes(password).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise CodecError("7z passwords must be valid UTF-8") from exc
    # An explicit empty password must never produce an unencrypted archive.
    if not secret:
        raise PasswordUnsupportedError("7z archives cannot be protected with an empty password")
    return secret


class SevenZCompressor:
    """LZMA2 7z archives with native AES-256 password protection (py7zr)."""

    format = ArchiveFormat.SEVENZ
    password_mode = PasswordMode.NATIVE

    def __init__(self, level: int = 6):
        self.level = max(0, min(int(level), 9))

    def _filters(self, encrypted: bool) -> list[dict]:
        filters = [{"id": py7zr.FILTER_LZMA2, "preset": self.level}]
        if encrypted:
            filters.append({"id": py7zr.FILTER_CRYPTO_AES256_SHA256})
        return filters

    def compress(self, entries: Sequence[ArchiveEntry], password: Optional[Password] = None) -> bytes:
        secret = _password_str(password)
        buf = io.BytesIO()
        try:
            with py7zr.SevenZipFile(buf, "w", filters=self._filters(secret is not None), password=secret) as archive:
                for entry in entries:
                    archive.writestr(entry.data, entry.name)
        except (SevenZipArchiveError, ValueError, OSError) as exc:
            raise CodecError(f"Failed to write 7z archive: {exc}") from exc
        return buf.getvalue()

    def decompress(self, data: bytes, password: Optional[Password] = None) -> list[ArchiveEntry]:
        secret = _password_str(password)
        try:
            with py7zr.SevenZipFile(io.BytesIO(data), "r", password=secret) as archive:
                names = [info.filename for info in archive.list() if not info.is_directory]
                contents = archive.readall() or {}
        # Foreign or mis-keyed input surfaces as anything from Bad7zFile and
        # PasswordRequired to lzma/CRC errors, depending on where parsing stops.
        except Exception as exc:
            raise CodecError(f"Invalid 7z archive: {exc}") from exc

        # Empty files carry no stream and are absent from readall().
        entries = [
            ArchiveEntry(name=name, data=contents[name].read() if name in contents else b"")
            for name in names
        ]
        logger.debug("Read %d entries from 7z archive", len(entries))
        return entries
