"""
Device population helpers.
"""

from typing import List

SERIAL_PREFIX = "SN-"


def generate_serial_numbers(count: int = 500) -> List[str]:
    """
    Generate the deterministic device population for a run.

    Serial numbers are zero-padded to three digits: SN-000, SN-001, ...

    Args:
        count: Number of devices

    Returns:
        Ordered list of serial numbers
    """
    if count < 0:
        raise ValueError(f"Device count must be non-negative, got {count}")
    return [f"{SERIAL_PREFIX}{i:03d}" for i in range(count)]
