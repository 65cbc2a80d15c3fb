# filename: huffman_service.py

from pathlib import Path

from huffman_archive import Archive, read_archive, write_archive
from huffman_core import HuffmanLogic
from huffman_errors import EmptyInputError, MissingFileError


class HuffmanService:
    def __init__(self):
        self.logic = HuffmanLogic()

    def build_archive(self, data):
        if not data:
            raise EmptyInputError("cannot encode an empty byte sequence")
        freqs = self.logic.frequencies(data)
        tree = self.logic.build_tree(freqs)
        codes = self.logic.generate_codes(tree)
        return Archive(freqs, len(data), self.logic.encode_symbols(data, codes))

    def compress(self, data):
        return write_archive(self.build_archive(data))

    def decompress(self, archive_bytes):
        archive = read_archive(archive_bytes)
        return self.logic.decode_symbols(archive.freqs, archive.compressed, archive.original_length)

    def compress_file(self, source, destination):
        """Encode ``source`` into ``destination`` and return the written Archive.

        A missing source is a hard failure (MissingFileError).
        """
        source = Path(source)
        if not source.is_file():
            raise MissingFileError(source)
        archive = self.build_archive(source.read_bytes())
        Path(destination).write_bytes(write_archive(archive))
        return archive

    def decompress_file(self, source, destination):
        """Decode ``source`` into ``destination``.

        Returns False without raising when ``source`` does not exist, so batch
        callers can skip it and carry on.
        """
        source = Path(source)
        if not source.is_file():
            return False
        Path(destination).write_bytes(self.decompress(source.read_bytes()))
        return True


def encode(data):
    return HuffmanService().compress(data)


def decode(archive_bytes):
    return HuffmanService().decompress(archive_bytes)
