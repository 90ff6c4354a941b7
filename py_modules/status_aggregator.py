"""
Status Aggregation
Builds point-in-time snapshots of CPU, GPU, power profile and battery state
"""
import os
import re
import logging
from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional

from host_query import CommandRunner, CommandQuery, CpuInfoQuery, HostQuery, SysfsQuery
from panel_enums import QueryPolicy
from panel_settings import PanelSettings, get_settings
from panel_utils import run_command

logger = logging.getLogger(__name__)

CAPACITY_MAX = 255
CAPACITY_PATTERN = re.compile(r"\+?[0-9]+")


@dataclass
class SystemStats:
    """CPU/GPU/power snapshot; every field is opaque host text"""
    cpu_model: str
    cpu_boost: str
    gpu_mode: str
    power_profile: str

    @property
    def boost_enabled(self) -> bool:
        return self.cpu_boost == "1"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class BatteryStatus:
    """Battery snapshot"""
    capacity: int
    status: str

    @property
    def is_charging(self) -> bool:
        return self.status == "Charging"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def parse_capacity(text: str) -> int:
    """Parse a battery percentage, 0 when the text is not an integer in 0..255"""
    text = text.strip()
    if not CAPACITY_PATTERN.fullmatch(text):
        if text:
            logger.warning(f"Unparsable battery capacity {text!r}, reporting 0")
        return 0
    # int() refuses very long digit strings; anything past three digits is out of range anyway
    digits = text.lstrip("+").lstrip("0")
    if len(digits) > 3:
        logger.warning(f"Battery capacity {text[:16]!r}... out of range, reporting 0")
        return 0
    value = int(digits or "0")
    if value > CAPACITY_MAX:
        logger.warning(f"Battery capacity {value} out of range, reporting 0")
        return 0
    return value


class StatusAggregator:
    """Gathers host state from independent, individually failure-prone queries.

    Holds no per-call state: queries are built fresh from settings on every
    call, so concurrent calls never share anything mutable.
    """

    def __init__(self, settings: Optional[PanelSettings] = None, runner: CommandRunner = run_command):
        self.settings = settings if settings is not None else get_settings()
        self.runner = runner

    def system_queries(self) -> Dict[str, HostQuery]:
        """Queries behind each SystemStats field, keyed by field name"""
        timeout = self.settings.get("command_timeout")
        return {
            "cpu_model": CpuInfoQuery(self.settings.get("cpuinfo_path"), timeout=timeout),
            "cpu_boost": SysfsQuery("cpu_boost", self.settings.get("cpu_boost_path"),
                                    QueryPolicy.BEST_EFFORT, timeout=timeout),
            "gpu_mode": CommandQuery("gpu_mode", [self.settings.get("gpu_switch_tool"), "-g"],
                                     QueryPolicy.BEST_EFFORT, timeout=timeout),
            "power_profile": CommandQuery("power_profile", [self.settings.get("power_profile_tool"), "get"],
                                          QueryPolicy.BEST_EFFORT, timeout=timeout),
        }

    def battery_queries(self) -> Dict[str, HostQuery]:
        """Queries behind each BatteryStatus field, keyed by field name"""
        timeout = self.settings.get("command_timeout")
        battery_dir = os.path.join(self.settings.get("power_supply_root"), self.settings.get("battery_name"))
        return {
            "capacity": SysfsQuery("battery_capacity", os.path.join(battery_dir, "capacity"),
                                   QueryPolicy.LOAD_BEARING, timeout=timeout),
            "status": SysfsQuery("battery_status", os.path.join(battery_dir, "status"),
                                 QueryPolicy.LOAD_BEARING, timeout=timeout),
        }

    def detect_stats(self) -> SystemStats:
        """Snapshot CPU model, boost flag, GPU mode and power profile.

        Raises SpawnFailure only when the CPU model query cannot be run.
        """
        queries = self.system_queries()
        values = {field: query.execute(self.runner) for field, query in queries.items()}
        stats = SystemStats(**values)
        logger.debug(f"Detected system stats: {stats}")
        return stats

    def get_battery_status(self) -> BatteryStatus:
        """Snapshot battery capacity and charge status.

        Raises SpawnFailure when either sub-query cannot be run.
        """
        queries = self.battery_queries()
        capacity_text = queries["capacity"].execute(self.runner)
        status = queries["status"].execute(self.runner)

        battery = BatteryStatus(capacity=parse_capacity(capacity_text), status=status)
        logger.debug(f"Battery status: {battery}")
        return battery
