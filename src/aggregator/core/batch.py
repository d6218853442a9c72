"""
Batch model.

A batch is the group of serial numbers sent in a single telemetry request.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Batch:
    """
    An ordered, immutable group of device serial numbers.

    Attributes:
        index: 1-based position of the batch within its run
        serial_numbers: Devices covered by this batch, in population order
    """

    index: int
    serial_numbers: Tuple[str, ...]

    def __post_init__(self):
        if not isinstance(self.serial_numbers, tuple):
            object.__setattr__(self, "serial_numbers", tuple(self.serial_numbers))

    @property
    def size(self) -> int:
        """Get the number of devices in this batch."""
        return len(self.serial_numbers)

    def __repr__(self) -> str:
        return f"Batch(index={self.index}, size={self.size})"


def partition(population: Sequence[T], size: int) -> List[List[T]]:
    """
    Split a population into consecutive groups of at most ``size`` items.

    Every group holds exactly ``size`` items except possibly the last one,
    which holds the remainder. An empty population yields no groups.

    Args:
        population: Ordered items to split
        size: Maximum group size, must be positive

    Returns:
        Ordered list of groups
    """
    if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
        raise ValueError(f"Batch size must be a positive integer, got {size!r}")

    items = list(population)
    return [items[i:i + size] for i in range(0, len(items), size)]


def create_batches(population: Sequence[str], size: int) -> List[Batch]:
    """Partition serial numbers into numbered batches (index starts at 1)."""
    return [
        Batch(index=i, serial_numbers=tuple(group))
        for i, group in enumerate(partition(population, size), start=1)
    ]
