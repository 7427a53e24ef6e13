"""Exception taxonomy for document extraction."""


class ExtractionError(Exception):
    """Base class for all extraction failures."""


class ArchiveError(ExtractionError):
    """ZIP container could not be read."""


class MalformedArchive(ArchiveError):
    """Signature mismatch or an offset/length outside the buffer."""


class DecompressionFailed(MalformedArchive):
    """Entry payload did not inflate cleanly to its declared size."""


class EntryNotFound(ArchiveError):
    """No entry with the requested path."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Entry not found: {path}")


class UnsupportedCompression(ArchiveError):
    """Entry uses a compression method other than Store or Deflate."""

    def __init__(self, path: str, method: int):
        self.path = path
        self.method = method
        super().__init__(f"Unsupported compression method {method} for {path}")


class EpubError(ExtractionError):
    """EPUB structural metadata is absent or unusable."""


class InvalidContainer(EpubError):
    """META-INF/container.xml is missing or names no rootfile."""


class MissingPackageDocument(EpubError):
    """The OPF package document named by the container is absent."""

    def __init__(self, opf_path: str):
        self.opf_path = opf_path
        super().__init__(f"Missing OPF file at {opf_path}")


class DecodeFailure(ExtractionError):
    """Text or markup bytes are not valid UTF-8."""


class UnsupportedFileType(ExtractionError):
    """Declared type has no extraction path."""
