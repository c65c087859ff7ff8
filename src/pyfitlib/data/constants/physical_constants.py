from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True)
class PhysicalConstants:
    """Unit conversions applied to instrument exports."""
    # Gravimetric sorption analysers log time in minutes
    SECONDS_PER_MINUTE: Final[float] = 60.0
