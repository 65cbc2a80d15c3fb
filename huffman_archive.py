# filename: huffman_archive.py
"""Binary archive layout (little-endian):

    int32   symbol count
    (uint16 symbol, int32 frequency) * symbol count, ascending symbols
    int32   original byte length
    int32   compressed byte length
    bytes   compressed data, MSB-first, zero padded
"""

import struct
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from huffman_errors import CorruptArchiveError

COUNT_FORMAT = struct.Struct("<i")
ENTRY_FORMAT = struct.Struct("<Hi")
LENGTHS_FORMAT = struct.Struct("<ii")

INT32_MAX = 2**31 - 1
SYMBOL_MAX = 0xFFFF


@dataclass(frozen=True)
class Archive:
    freqs: Mapping[int, int]
    original_length: int
    compressed: bytes

    @property
    def compressed_length(self):
        return len(self.compressed)


def _check_int32(name, value):
    if not 0 <= value <= INT32_MAX:
        raise ValueError(f"{name} {value} does not fit in a non-negative int32")


def _consistency_problem(freqs, original_length, compressed_length):
    """Describe why the table and lengths cannot belong together, or return None."""
    symbol_total = sum(freqs.values())
    expected_pairs = (original_length + 1) // 2
    if symbol_total != expected_pairs:
        return (
            f"frequency table counts {symbol_total} symbols, "
            f"original length {original_length} needs {expected_pairs}"
        )
    # every symbol costs at least one bit
    if compressed_length * 8 < symbol_total:
        return f"{compressed_length} payload bytes cannot hold {symbol_total} symbols"
    return None


def write_archive(archive):
    _check_int32("symbol count", len(archive.freqs))
    _check_int32("original length", archive.original_length)
    _check_int32("compressed length", archive.compressed_length)

    problem = _consistency_problem(archive.freqs, archive.original_length, archive.compressed_length)
    if problem:
        raise ValueError(problem)

    parts = [COUNT_FORMAT.pack(len(archive.freqs))]
    for symbol in sorted(archive.freqs):
        if not 0 <= symbol <= SYMBOL_MAX:
            raise ValueError(f"symbol {symbol} does not fit in 16 bits")
        freq = archive.freqs[symbol]
        _check_int32(f"frequency of symbol {symbol:#06x}", freq)
        if freq == 0:
            raise ValueError(f"frequency of symbol {symbol:#06x} must be positive")
        parts.append(ENTRY_FORMAT.pack(symbol, freq))
    parts.append(LENGTHS_FORMAT.pack(archive.original_length, archive.compressed_length))
    parts.append(bytes(archive.compressed))
    return b"".join(parts)


def _unpack(fmt, data, offset, what):
    if offset + fmt.size > len(data):
        raise CorruptArchiveError(
            f"archive truncated while reading {what}: need {fmt.size} bytes at offset {offset}, "
            f"have {len(data) - offset}"
        )
    return fmt.unpack_from(data, offset), offset + fmt.size


def read_archive(data):
    (symbol_count,), offset = _unpack(COUNT_FORMAT, data, 0, "symbol count")
    if symbol_count < 0:
        raise CorruptArchiveError(f"negative symbol count {symbol_count}")

    freqs = {}
    for _ in range(symbol_count):
        (symbol, freq), offset = _unpack(ENTRY_FORMAT, data, offset, "frequency table")
        if freq <= 0:
            raise CorruptArchiveError(f"non-positive frequency {freq} for symbol {symbol:#06x}")
        if symbol in freqs:
            raise CorruptArchiveError(f"duplicate symbol {symbol:#06x} in frequency table")
        freqs[symbol] = freq

    (original_length, compressed_length), offset = _unpack(LENGTHS_FORMAT, data, offset, "lengths")
    if original_length < 0 or compressed_length < 0:
        raise CorruptArchiveError(
            f"negative length (original={original_length}, compressed={compressed_length})"
        )

    remaining = len(data) - offset
    if compressed_length > remaining:
        raise CorruptArchiveError(
            f"declared compressed length {compressed_length} exceeds the {remaining} bytes left"
        )
    if compressed_length < remaining:
        raise CorruptArchiveError(f"{remaining - compressed_length} unexpected trailing bytes")

    problem = _consistency_problem(freqs, original_length, compressed_length)
    if problem:
        raise CorruptArchiveError(problem)

    return Archive(MappingProxyType(freqs), original_length, bytes(data[offset:]))
