# filename: huffman_errors.py


class HuffmanError(Exception):
    """Base class for every error raised by the pair-Huffman codec."""


class EmptyInputError(HuffmanError, ValueError):
    """Raised when asked to encode zero bytes (no symbol to build a tree from)."""


class MissingFileError(HuffmanError, FileNotFoundError):
    def __init__(self, path):
        super().__init__(f"file not found: {path}")
        self.path = path


class CorruptArchiveError(HuffmanError, ValueError):
    """Raised when an archive is truncated, inconsistent or cannot be decoded."""
