"""
PowerPanel Enumerations
Core enums for the PowerPanel backend
"""
from enum import Enum


class QueryPolicy(Enum):
    """How a host query failure affects the operation that issued it"""
    LOAD_BEARING = "load_bearing"  # spawn failure aborts the whole operation
    BEST_EFFORT = "best_effort"    # any failure degrades only this field


class GPUMode(Enum):
    """GPU switching modes offered by the panel (supergfxctl names)"""
    INTEGRATED = "Integrated"
    HYBRID = "Hybrid"
    DEDICATED = "Dedicated"

    @property
    def description(self) -> str:
        return {
            GPUMode.INTEGRATED: "iGPU only - Best battery life",
            GPUMode.HYBRID: "Dynamic switching - Balanced",
            GPUMode.DEDICATED: "dGPU only - Max performance",
        }[self]


class PowerProfile(Enum):
    """Power profiles offered by the panel (power-profiles-daemon names)"""
    PERFORMANCE = "performance"
    BALANCED = "balanced"
    POWER_SAVER = "power-saver"

    @property
    def description(self) -> str:
        return {
            PowerProfile.PERFORMANCE: "Maximum power",
            PowerProfile.BALANCED: "Best of both worlds",
            PowerProfile.POWER_SAVER: "Maximum battery life",
        }[self]

    @property
    def boost(self) -> bool:
        """Whether the helper leaves CPU boost enabled for this profile"""
        return self is not PowerProfile.POWER_SAVER

    @property
    def display_name(self) -> str:
        return self.value.replace('-', ' ').title()


class LogLevel(Enum):
    """Log levels accepted in settings"""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"
