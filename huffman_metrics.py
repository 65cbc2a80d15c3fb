# filename: huffman_metrics.py

import math
from collections import Counter
from dataclasses import dataclass

from huffman_core import HuffmanLogic

TABLE_WIDTH = 55
LABEL_WIDTH = 30


def shannon_entropy(counts):
    counts = [count for count in counts if count > 0]
    total = sum(counts)
    if not total:
        return 0.0
    return -sum(count / total * math.log2(count / total) for count in counts)


def byte_entropy(data):
    return shannon_entropy(Counter(data).values())


def pair_entropy(freqs):
    return shannon_entropy(freqs.values())


def encoded_bit_length(freqs):
    """Number of payload bits the Huffman code for ``freqs`` produces."""
    logic = HuffmanLogic()
    codes = logic.generate_codes(logic.build_tree(freqs))
    return sum(freq * len(codes[symbol]) for symbol, freq in freqs.items())


@dataclass
class CompressionReport:
    name: str
    original_size: int
    encoded_bits: int
    byte_entropy: float
    pair_entropy: float

    @property
    def conditional_entropy(self):
        return self.pair_entropy - self.byte_entropy

    @property
    def compressed_size(self):
        return (self.encoded_bits + 7) // 8

    @property
    def bits_per_byte(self):
        return self.encoded_bits / self.original_size if self.original_size else 0.0

    @property
    def compressed_percent(self):
        if not self.original_size:
            return 0.0
        return 100 - self.compressed_size / self.original_size * 100

    def as_dict(self):
        return {
            "byte_entropy": self.byte_entropy,
            "pair_entropy": self.pair_entropy,
            "conditional_entropy": self.conditional_entropy,
            "bits_per_byte": self.bits_per_byte,
            "original_size": self.original_size,
            "compressed_size": self.compressed_size,
            "compressed_percent": self.compressed_percent,
        }


def build_report(name, data, freqs):
    return CompressionReport(
        name=str(name),
        original_size=len(data),
        encoded_bits=encoded_bit_length(freqs),
        byte_entropy=byte_entropy(data),
        pair_entropy=pair_entropy(freqs),
    )


def format_report(report):
    rule = "-" * TABLE_WIDTH
    value_width = TABLE_WIDTH - LABEL_WIDTH

    def row(label, value):
        return f"{label:<{LABEL_WIDTH}}{value:>{value_width}}"

    return "\n".join([
        f"File: {report.name}",
        rule,
        row("Metric", "Value"),
        rule,
        row("Entropy H(X):", f"{report.byte_entropy:.6f}"),
        row("Entropy H(XX):", f"{report.pair_entropy:.6f}"),
        row("Entropy H(X|X):", f"{report.conditional_entropy:.6f}"),
        row("Avg bits/byte:", f"{report.bits_per_byte:.6f}"),
        row("Initial size (bytes):", str(report.original_size)),
        row("Compressed size (bytes):", str(report.compressed_size)),
        rule,
        row("Compressed (%):", f"{report.compressed_percent:.2f}"),
        rule,
    ])
