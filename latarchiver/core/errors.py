class ArchiveError(Exception):
    """Base class for recoverable archive, envelope and accelerator failures."""


class EnvelopeError(ArchiveError, ValueError):
    """Encrypted payload could not be opened."""


class TooShortError(EnvelopeError):
    """Input is shorter than the smallest possible envelope."""


class LikelyCorruptError(EnvelopeError):
    """Envelope header is all zeros; the file was probably zeroed or truncated."""


class AuthenticationFailure(EnvelopeError):
    """Tag verification failed: wrong password or tampered data (never distinguished)."""


class CodecError(ArchiveError):
    """Format-specific parse or write failure."""


class UnknownFormatError(CodecError):
    """No codec is registered for the requested format, or none could parse the data."""


class PasswordUnsupportedError(CodecError):
    """The codec cannot protect archives with a password."""


class AcceleratorUnavailableError(CodecError):
    """The operation needs a GPU accelerator and none is available."""


class CodecNotImplementedError(CodecError, NotImplementedError):
    """The codec path exists but cannot produce genuine output yet."""


class AcceleratorError(ArchiveError):
    """A GPU kernel or accelerator call failed."""


class BufferLayoutError(AcceleratorError, ValueError):
    """Probability or weight buffers do not match the [num_models][num_bits] layout."""
