from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class LayoutConfig:
    """Grid shape and generation constants for a warehouse layout.

    Fields:
        aisles: Aisle labels, in generation order
        bays_per_aisle: Number of bays per aisle (numbered from 1)
        levels_per_bay: Number of levels per bay (numbered from 1)
        occupancy_threshold: A slot is occupied when its draw exceeds this value
        seed: Seed used when no seed is passed explicitly
    """

    aisles: Tuple[str, ...] = ("A", "B", "C", "D")
    bays_per_aisle: int = 8
    levels_per_bay: int = 4
    occupancy_threshold: float = 0.3
    seed: int = 12345

    # Scene geometry (metres)
    slot_size: float = 1.2
    aisle_spacing: float = 6.0
    aisle_offset: float = -9.0
    bay_spacing: float = 2.0
    bay_offset: float = -8.0
    level_spacing: float = 1.5
    level_offset: float = -0.5

    def __post_init__(self) -> None:
        if not self.aisles:
            raise ValueError("aisles must not be empty")
        if self.bays_per_aisle <= 0:
            raise ValueError(f"bays_per_aisle must be positive, got {self.bays_per_aisle}")
        if self.levels_per_bay <= 0:
            raise ValueError(f"levels_per_bay must be positive, got {self.levels_per_bay}")
        if not (0.0 <= self.occupancy_threshold <= 1.0):
            raise ValueError(f"occupancy_threshold must be in [0, 1], got {self.occupancy_threshold}")

    @property
    def n_slots(self) -> int:
        return len(self.aisles) * self.bays_per_aisle * self.levels_per_bay


DEFAULT_CONFIG = LayoutConfig()
