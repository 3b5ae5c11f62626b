"""Fixed-width palette indices packed LSB-first into 64-bit words.

Entry ``i`` occupies bits ``[i * bits, (i + 1) * bits)`` of the bitstream formed by
concatenating the words, least significant bit first; an entry may span two words.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, MutableSequence, Sequence

WORD_BITS = 64
WORD_MASK = (1 << WORD_BITS) - 1

MIN_BITS = 2
MAX_BITS = 32


def bits_per_entry(palette_size: int) -> int:
    if palette_size <= 1:
        return MIN_BITS
    return max(MIN_BITS, (palette_size - 1).bit_length())


def packed_length(count: int, bits: int) -> int:
    return -(-count * bits // WORD_BITS)


def read_entry(words: Sequence[int], i: int, bits: int) -> int:
    bit_offset = i * bits
    word_index, bit_index = divmod(bit_offset, WORD_BITS)
    mask = (1 << bits) - 1

    # missing words read as zero
    current = words[word_index] & WORD_MASK if word_index < len(words) else 0
    if bit_index + bits <= WORD_BITS:
        return (current >> bit_index) & mask

    following = words[word_index + 1] & WORD_MASK if word_index + 1 < len(words) else 0
    return ((current >> bit_index) | (following << (WORD_BITS - bit_index))) & mask


def write_entry(words: MutableSequence[int], i: int, bits: int, value: int) -> None:
    mask = (1 << bits) - 1
    if not 0 <= value <= mask:
        raise ValueError(f"Value {value} does not fit in {bits} bits.")

    bit_offset = i * bits
    word_index, bit_index = divmod(bit_offset, WORD_BITS)
    end_word = (bit_offset + bits - 1) // WORD_BITS
    if end_word >= len(words):
        words.extend([0] * (end_word + 1 - len(words)))

    current = words[word_index] & WORD_MASK
    cleared = current & ~(mask << bit_index) & WORD_MASK
    words[word_index] = cleared | ((value << bit_index) & WORD_MASK)

    if bit_index + bits > WORD_BITS:
        overlap = bit_index + bits - WORD_BITS
        overlap_mask = (1 << overlap) - 1
        following = words[word_index + 1] & WORD_MASK
        words[word_index + 1] = (following & ~overlap_mask & WORD_MASK) | (
            value >> (bits - overlap)
        )


def decode(words: Sequence[int], bits: int, count: int) -> list[int]:
    _check_bits(bits)
    if count < 0:
        raise ValueError(f"Negative entry count: {count}")
    return [read_entry(words, i, bits) for i in range(count)]


def encode(indices: Iterable[int], bits: int, count: int | None = None) -> list[int]:
    _check_bits(bits)
    values = list(indices)
    if count is None:
        count = len(values)
    words = [0] * packed_length(count, bits)
    for i, value in enumerate(values):
        write_entry(words, i, bits, value)
    return words


def repack(words: Sequence[int], old_bits: int, new_bits: int, count: int) -> list[int]:
    if old_bits == new_bits:
        return list(words)
    return encode(decode(words, old_bits, count), new_bits, count)


def _check_bits(bits: int):
    if not MIN_BITS <= bits <= MAX_BITS:
        raise ValueError(f"Bits per entry must be in [{MIN_BITS}, {MAX_BITS}]; got {bits}")
