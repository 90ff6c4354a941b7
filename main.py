import asyncio
import os
import sys
import logging
import logging.handlers
import psutil
from typing import Dict, Any, Optional, List

# Add py_modules directory to Python path for dynamic imports
py_modules_path = os.path.join(os.path.dirname(__file__), 'py_modules')
if py_modules_path not in sys.path:
    sys.path.insert(0, py_modules_path)

from ac_power_manager import detect_hardware_ac_status
from host_query import CommandRunner
from panel_enums import GPUMode, PowerProfile
from panel_settings import PanelSettings, get_settings
from panel_utils import PanelError, find_executable, run_command
from privileged_actions import PrivilegedActionDispatcher
from status_aggregator import StatusAggregator

# Debug configuration
DEBUG_ENABLED = os.environ.get('POWERPANEL_DEBUG', 'false').lower() == 'true'
LOG_FILE = os.environ.get('POWERPANEL_LOG_FILE')

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

log = logging.getLogger("PowerPanel")

# Handlers are attached to the root logger only once per process
_logging_configured = False


def configure_logging(level: str = "info", log_file: Optional[str] = LOG_FILE) -> None:
    """Attach console (and optional rotating file) handlers to the root logger once"""
    global _logging_configured
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if DEBUG_ENABLED else getattr(logging, level.upper(), logging.INFO))
    if _logging_configured:
        return

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if log_file:
        file_handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=1024*1024*5, backupCount=5)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    _logging_configured = True


# Version management
def get_plugin_version() -> str:
    """Get backend version from the VERSION file"""
    version_file_path = os.path.join(os.path.dirname(__file__), "VERSION")
    try:
        with open(version_file_path, 'r') as f:
            version = f.read().strip()
            if version:
                return version
    except OSError as e:
        log.error(f"Failed to get plugin version: {e}")
    return "unknown"


class Plugin:
    """RPC surface called by the panel front end.

    Each method runs the blocking host work in a worker thread so that
    simultaneous requests from the UI never wait on one another. Failures
    propagate as PanelError; the front end shows str(error).
    """

    def __init__(self, settings: Optional[PanelSettings] = None, runner: CommandRunner = run_command):
        self.settings = settings if settings is not None else get_settings()
        self.aggregator = StatusAggregator(self.settings, runner)
        self.dispatcher = PrivilegedActionDispatcher(self.settings, runner)
        self.warning_cache = set()  # Track warnings to prevent duplicates

    def log_warning_once(self, message: str):
        """Log a warning message only once to prevent spam"""
        if message not in self.warning_cache:
            self.warning_cache.add(message)
            log.warning(message)

    async def _main(self):
        configure_logging(self.settings.get("log_level", "info"))
        log.info(f"PowerPanel {get_plugin_version()} initializing...")

        for key in ("gpu_switch_tool", "power_profile_tool", "elevation_command", "profile_helper_path"):
            tool = self.settings.get(key)
            if find_executable(tool) is None:
                self.log_warning_once(f"{key} '{tool}' not found; related features will report failures")

    async def _unload(self):
        log.info("PowerPanel unloading...")

    async def detect_stats(self) -> Dict[str, Any]:
        """CPU model, boost flag, GPU mode and active power profile"""
        try:
            stats = await asyncio.to_thread(self.aggregator.detect_stats)
        except PanelError as e:
            log.error(f"Failed to detect stats: {e}")
            raise
        return stats.to_dict()

    async def get_battery_status(self) -> Dict[str, Any]:
        """Battery capacity percentage and charge status"""
        try:
            battery = await asyncio.to_thread(self.aggregator.get_battery_status)
        except PanelError as e:
            log.error(f"Failed to get battery status: {e}")
            raise
        return battery.to_dict()

    async def set_gpu_mode(self, mode: str) -> None:
        """Switch GPU mode; takes effect after logout or reboot"""
        try:
            await asyncio.to_thread(self.dispatcher.set_gpu_mode, mode)
        except PanelError as e:
            log.error(f"SET_GPU_MODE: {mode}: {e}")
            raise
        log.info(f"SET_GPU_MODE: requested {mode}")

    async def set_profile(self, profile_name: str) -> None:
        """Apply a power profile through the privileged helper"""
        try:
            await asyncio.to_thread(self.dispatcher.set_profile, profile_name)
        except PanelError as e:
            log.error(f"SET_PROFILE: {profile_name}: {e}")
            raise
        log.info(f"SET_PROFILE: applied {profile_name}")

    async def get_ac_power_status(self) -> bool:
        """Get AC power connection status using hardware-level detection"""
        power_supply_root = self.settings.get("power_supply_root")

        supported, hardware_status = await asyncio.to_thread(detect_hardware_ac_status, power_supply_root)
        if supported:
            if hardware_status is not None:
                log.debug(f"Hardware AC power status: {hardware_status}")
                return hardware_status
        else:
            self.log_warning_once("Hardware AC detection not supported")

        # Fallback to psutil if hardware detection unavailable
        log.info("Falling back to psutil battery detection")
        try:
            battery = await asyncio.to_thread(psutil.sensors_battery)
        except (OSError, RuntimeError) as e:
            log.warning(f"psutil battery detection failed: {e}")
            battery = None

        if battery is not None and battery.power_plugged is not None:
            return bool(battery.power_plugged)

        log.error("All AC power detection methods failed")
        return False

    async def get_power_profiles(self) -> List[Dict[str, Any]]:
        """Power profile presets shown by the front end"""
        return [
            {
                "id": profile.value,
                "name": profile.display_name,
                "description": profile.description,
                "boost": profile.boost,
            }
            for profile in PowerProfile
        ]

    async def get_gpu_modes(self) -> List[Dict[str, Any]]:
        """GPU mode presets shown by the front end"""
        return [
            {"id": mode.value, "name": mode.value, "description": mode.description}
            for mode in GPUMode
        ]

    async def get_plugin_version(self) -> str:
        return get_plugin_version()
