"""
Privileged Action Dispatch
Runs the panel's mutating actions through the elevation gate (pkexec)
"""
import logging
from typing import List, Optional

from host_query import CommandRunner
from panel_settings import PanelSettings, get_settings
from panel_utils import ElevationDenied, ToolRejected, run_command

logger = logging.getLogger(__name__)

# pkexec exit statuses for "not authorized" and "authentication dialog dismissed"
ELEVATION_DENIED_CODES = (126, 127)

GPU_MODE_FAILED = "Failed to set GPU mode"
PROFILE_FAILED = "Failed to apply profile"


class PrivilegedActionDispatcher:
    """Executes one mutating action per call; success means the elevated process exited 0.

    Mode and profile names are opaque and passed through unchanged.
    """

    def __init__(self, settings: Optional[PanelSettings] = None, runner: CommandRunner = run_command):
        self.settings = settings if settings is not None else get_settings()
        self.runner = runner

    def _elevated(self, *argv: str) -> List[str]:
        return [self.settings.get("elevation_command"), *argv]

    def _dispatch(self, command: List[str], failure_message: str) -> None:
        logger.info(f"Running privileged action: {' '.join(command)}")
        # Raises SpawnFailure with the OS error text when the gate cannot be started
        result = self.runner(command, timeout=None)

        if result.success:
            logger.info(f"Privileged action succeeded: {' '.join(command)}")
            return

        if result.returncode in ELEVATION_DENIED_CODES:
            logger.warning(f"Elevation denied (exit {result.returncode}) for: {' '.join(command)}")
            raise ElevationDenied(failure_message, result.returncode)

        logger.error(f"Privileged action failed (exit {result.returncode}): {' '.join(command)}: "
                     f"{result.stderr.strip()}")
        raise ToolRejected(failure_message, result.returncode)

    def set_gpu_mode(self, mode: str) -> None:
        """Switch the discrete GPU mode with the GPU switching tool"""
        command = self._elevated(self.settings.get("gpu_switch_tool"), "-m", mode)
        self._dispatch(command, GPU_MODE_FAILED)

    def set_profile(self, profile_name: str) -> None:
        """Apply a power profile with the local profile helper"""
        command = self._elevated(self.settings.get("profile_helper_path"), profile_name)
        self._dispatch(command, PROFILE_FAILED)
