"""
Hardware-level AC power detection module
Reads the AC adapter and battery status attributes under the power_supply class
"""
import os
import glob
import logging
from typing import List, Optional, Tuple

from panel_utils import read_file_safe

logger = logging.getLogger(__name__)

AC_PATTERNS = ['AC*/online', 'ADP*/online', 'ACAD/online']
BATTERY_PATTERNS = ['BAT*/status', 'battery/status']


def find_ac_power_path(power_supply_root: str) -> Optional[str]:
    """Find the AC adapter online attribute"""
    for pattern in AC_PATTERNS:
        matches = sorted(glob.glob(os.path.join(power_supply_root, pattern)))
        if matches:
            return matches[0]
    return None


def find_battery_status_paths(power_supply_root: str) -> List[str]:
    """Find every battery status attribute"""
    paths = []
    for pattern in BATTERY_PATTERNS:
        paths.extend(sorted(glob.glob(os.path.join(power_supply_root, pattern))))
    return paths


def supports_hardware_ac_detection(power_supply_root: str) -> bool:
    """Check if hardware-level AC power detection is available"""
    return bool(find_ac_power_path(power_supply_root) or find_battery_status_paths(power_supply_root))


def get_hardware_ac_status(power_supply_root: str) -> Optional[bool]:
    """Get AC power status directly from hardware, None when it cannot be determined"""
    ac_power_path = find_ac_power_path(power_supply_root)
    if ac_power_path:
        ac_status = read_file_safe(ac_power_path)
        logger.debug(f"AC power direct reading: {ac_status}")
        if ac_status == "1":
            return True
        elif ac_status == "0":
            return False

    # Charging/Full = AC power connected, Discharging/Not charging = on battery
    for battery_path in find_battery_status_paths(power_supply_root):
        battery_status = read_file_safe(battery_path).lower()
        logger.debug(f"Battery status reading: {battery_status}")
        if battery_status in ['charging', 'full']:
            return True
        elif battery_status in ['discharging', 'not charging']:
            return False

    logger.warning("Could not determine AC power status from hardware")
    return None


def detect_hardware_ac_status(power_supply_root: str) -> Tuple[bool, Optional[bool]]:
    """Return (hardware detection supported, AC status or None) in one sysfs pass"""
    if not supports_hardware_ac_detection(power_supply_root):
        return False, None
    return True, get_hardware_ac_status(power_supply_root)
