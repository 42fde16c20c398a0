"""Integer bit-set helpers for right-item sets.

Python integers serve as bit-sets over right items: bit j set means right
item j belongs to the set. Sets never hold more than MAX_SIZE items so a
trial's knowledge fits a fixed-width field.
"""

from typing import Iterator, Optional

# Widest item set a trial supports (one 16-bit field per left item)
MAX_SIZE = 16


def popcount(mask: int) -> int:
    """Number of items in the set."""
    return bin(mask).count("1")


def full_mask(size: int) -> int:
    """Set holding every item in [0, size).

    Args:
        size: Number of items

    Returns:
        Integer with the low `size` bits set
    """
    return (1 << size) - 1


def bit(index: int) -> int:
    """Single-item set for `index`."""
    return 1 << index


def has_bit(mask: int, index: int) -> bool:
    """Check whether item `index` is in the set."""
    return (mask >> index) & 1 == 1


def is_singleton(mask: int) -> bool:
    """True if exactly one item is in the set."""
    return mask > 0 and (mask & (mask - 1)) == 0


def single_index(mask: int) -> Optional[int]:
    """Index of the only item of a singleton set, None otherwise."""
    if not is_singleton(mask):
        return None
    return mask.bit_length() - 1


def first_clear(mask: int, size: int) -> Optional[int]:
    """Lowest index in [0, size) that is NOT in the set.

    Args:
        mask: Bit-set to scan
        size: Number of valid indices

    Returns:
        Lowest missing index, or None when all `size` items are present
    """
    free = ~mask & full_mask(size)
    if free == 0:
        return None
    return (free & -free).bit_length() - 1


def iter_bits(mask: int) -> Iterator[int]:
    """Yield item indices of the set in increasing order."""
    while mask:
        low = mask & -mask
        yield low.bit_length() - 1
        mask ^= low


def to_bitstring(mask: int, size: int) -> str:
    """Render the set as a string of 0/1, item 0 first."""
    return "".join("1" if has_bit(mask, j) else "0" for j in range(size))
