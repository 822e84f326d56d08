"""
Index-set list mutations.

Both operations work against a snapshot of the original indices: the
sequence is partitioned into kept and selected elements in a single pass,
so simultaneous removals never shift one another.
"""
from __future__ import annotations

from typing import AbstractSet, Iterable, List, Sequence, Tuple, TypeVar

T = TypeVar("T")


class IndexOutOfRangeError(IndexError):
    """Raised when a row index does not address the sequence it was given."""

    def __init__(self, index: object, size: int, what: str = "index"):
        self.index = index
        self.size = size
        super().__init__(f"{what} {index!r} out of range for sequence of length {size}")


def _validate_indices(indices: Iterable[int], size: int) -> AbstractSet[int]:
    checked = set()
    for index in indices:
        if isinstance(index, bool) or not isinstance(index, int):
            raise IndexOutOfRangeError(index, size)
        if not 0 <= index < size:
            raise IndexOutOfRangeError(index, size)
        checked.add(index)
    return checked


def _partition(sequence: Sequence[T], selected: AbstractSet[int]) -> Tuple[List[T], List[T]]:
    kept: List[T] = []
    picked: List[T] = []
    for i, element in enumerate(sequence):
        (picked if i in selected else kept).append(element)
    return kept, picked


def move_items(
    sequence: Sequence[T],
    source: Iterable[int],
    destination: int,
) -> Tuple[T, ...]:
    """
    Move the elements at ``source`` so they land before ``destination``.

    Args:
        sequence: Original ordered sequence (not modified)
        source: Indices into the original sequence, in any order
        destination: Offset into the original sequence, 0..len(sequence),
            before which the moved block is inserted

    Returns:
        New tuple with the moved elements contiguous and in their original
        relative order

    Raises:
        IndexOutOfRangeError: If any index falls outside its valid range

    Example:
        >>> move_items(["Foo", "Bar", "Baz", "Bing", "Bang"], {0}, 3)
        ('Bar', 'Baz', 'Foo', 'Bing', 'Bang')
    """
    size = len(sequence)
    selected = _validate_indices(source, size)
    if isinstance(destination, bool) or not isinstance(destination, int):
        raise IndexOutOfRangeError(destination, size, "destination")
    if not 0 <= destination <= size:
        raise IndexOutOfRangeError(destination, size, "destination")

    kept, moved = _partition(sequence, selected)
    # Unmoved rows sitting before the destination offset
    insert_at = sum(1 for i in range(destination) if i not in selected)
    return tuple(kept[:insert_at] + moved + kept[insert_at:])


def delete_items(sequence: Sequence[T], indices: Iterable[int]) -> Tuple[T, ...]:
    """
    Remove the elements at ``indices`` of the original sequence.

    Raises:
        IndexOutOfRangeError: If any index falls outside the sequence
    """
    selected = _validate_indices(indices, len(sequence))
    kept, _ = _partition(sequence, selected)
    return tuple(kept)
