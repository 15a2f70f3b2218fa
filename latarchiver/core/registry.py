from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Iterable, Optional, Sequence, Union

from .archive import ArchiveEntry, ArchiveFormat, CompressionOptions, Compressor, PasswordMode
from .encrypt import Password, decrypt_bytes, encrypt_bytes
from .errors import ArchiveError, EnvelopeError, PasswordUnsupportedError, UnknownFormatError

if TYPE_CHECKING:
    from .accelerator import GpuAccelerator

logger = logging.getLogger(__name__)

PROBE_ORDER = (
    ArchiveFormat.ZIP,
    ArchiveFormat.SEVENZ,
    ArchiveFormat.LAT,
    ArchiveFormat.PAQG,
)

FormatSelector = Union[str, ArchiveFormat]


class _EnvelopeOpener:
    """Decrypts an envelope at most once, replaying the result or the failure."""

    def __init__(self, data: bytes, password: Password):
        self._data = data
        self._password = password
        self._plaintext: Optional[bytes] = None
        self._error: Optional[EnvelopeError] = None

    def open(self) -> bytes:
        if self._error is not None:
            raise self._error
        if self._plaintext is None:
            try:
                self._plaintext = decrypt_bytes(self._data, self._password)
            except EnvelopeError as exc:
                self._error = exc
                raise
        return self._plaintext


class CodecRegistry:
    """
    Maps archive formats to codecs and applies the password policy.

    Codecs with PasswordMode.ENVELOPE get their output wrapped in the
    password envelope; NATIVE codecs receive the password directly.
    """

    def __init__(self, codecs: Iterable[Compressor] = (), default_password: Optional[Password] = None):
        self._codecs: dict[ArchiveFormat, Compressor] = {}
        self._default_password = default_password
        for codec in codecs:
            self.register(codec)

    def register(self, codec: Compressor) -> None:
        self._codecs[codec.format] = codec

    def formats(self) -> list[ArchiveFormat]:
        return list(self._codecs)

    def get(self, fmt: FormatSelector) -> Compressor:
        try:
            key = ArchiveFormat.parse(fmt)
        except ValueError as exc:
            raise UnknownFormatError(str(exc)) from exc
        codec = self._codecs.get(key)
        if codec is None:
            raise UnknownFormatError(f"No codec registered for {key.value}")
        return codec

    def format_for_path(self, path: Union[str, os.PathLike]) -> ArchiveFormat:
        ext = os.path.splitext(os.fspath(path))[1].lower()
        for fmt in ArchiveFormat:
            if fmt.extension == ext and fmt in self._codecs:
                return fmt
        raise UnknownFormatError(f"Unrecognised archive extension: {ext or '(none)'}")

    def _password(self, password: Optional[Password]) -> Optional[Password]:
        return self._default_password if password is None else password

    def compress(
        self,
        entries: Sequence[ArchiveEntry],
        fmt: FormatSelector,
        password: Optional[Password] = None,
    ) -> bytes:
        codec = self.get(fmt)
        password = self._password(password)
        logger.debug("Compressing %d entries as %s", len(entries), codec.format.value)

        if password is None:
            return codec.compress(entries, None)
        if codec.password_mode == PasswordMode.NATIVE:
            return codec.compress(entries, password)
        if codec.password_mode == PasswordMode.ENVELOPE:
            return encrypt_bytes(codec.compress(entries, None), password)
        raise PasswordUnsupportedError(f"Password protection is not available for {codec.format.value}")

    def _decompress_with(
        self,
        codec: Compressor,
        data: bytes,
        password: Optional[Password],
        envelope: Optional["_EnvelopeOpener"] = None,
    ) -> list[ArchiveEntry]:
        if password is None:
            return codec.decompress(data, None)
        if codec.password_mode == PasswordMode.NATIVE:
            return codec.decompress(data, password)
        if codec.password_mode == PasswordMode.ENVELOPE:
            envelope = envelope or _EnvelopeOpener(data, password)
            return codec.decompress(envelope.open(), None)
        raise PasswordUnsupportedError(f"Password protection is not available for {codec.format.value}")

    def decompress(
        self,
        data: bytes,
        fmt: Optional[FormatSelector] = None,
        password: Optional[Password] = None,
    ) -> list[ArchiveEntry]:
        if fmt is None:
            _, entries = self.probe(data, password)
            return entries
        return self._decompress_with(self.get(fmt), data, self._password(password))

    def probe(self, data: bytes, password: Optional[Password] = None) -> tuple[ArchiveFormat, list[ArchiveEntry]]:
        """
        Best-effort sniff: try each codec in priority order and return the first
        that parses the data. This is not a signature check.

        Envelope codecs share one decryption, so a password costs a single
        key derivation however many of them are tried.
        """
        password = self._password(password)
        envelope = None if password is None else _EnvelopeOpener(data, password)
        last_error: Optional[ArchiveError] = None
        for fmt in PROBE_ORDER:
            codec = self._codecs.get(fmt)
            if codec is None:
                continue
            try:
                entries = self._decompress_with(codec, data, password, envelope)
            except ArchiveError as exc:
                logger.debug("Probe: %s rejected input (%s)", fmt.value, type(exc).__name__)
                last_error = exc
                continue
            logger.debug("Probe: %s accepted input with %d entries", fmt.value, len(entries))
            return fmt, entries

        raise UnknownFormatError("No registered codec could read the archive") from last_error


def build_registry(
    options: Optional[CompressionOptions] = None,
    accelerator: Optional["GpuAccelerator"] = None,
    accelerator_order: Optional[Iterable[str]] = None,
) -> CodecRegistry:
    """
    Create a registry with the built-in zip, 7z, lat and paqg codecs.

    Without an explicit accelerator, the process-wide one selected by
    options.backend is shared by the accelerated codecs.
    """
    from ..formats import LatCompressor, PaqgCompressor, SevenZCompressor, ZipCompressor
    from .accelerator import DEFAULT_ORDER, select_accelerator

    options = options or CompressionOptions()
    if accelerator is None:
        accelerator = select_accelerator(options.backend, tuple(accelerator_order or DEFAULT_ORDER))
    return CodecRegistry(
        [
            ZipCompressor(level=options.level),
            SevenZCompressor(level=options.level),
            LatCompressor(accelerator),
            PaqgCompressor(accelerator),
        ],
        default_password=options.password,
    )
