"""
PowerPanel Utility Functions
Process execution, file helpers and the exception hierarchy shared by the backend
"""
import os
import shutil
import logging
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Union

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Outcome of a child process that was spawned and ran to completion"""
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0


def run_command(command: Union[str, List[str]], timeout: Optional[float] = None) -> CommandResult:
    """
    Execute a command and wait for it to exit

    Args:
        command: Command to execute (string or list)
        timeout: Command timeout in seconds, None waits forever

    Returns:
        CommandResult with the exit status and decoded output

    Raises:
        SpawnFailure: the process could not be created or did not finish in time
    """
    if isinstance(command, str):
        command = command.split()

    try:
        result = subprocess.run(
            command,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
            check=False
        )
    except subprocess.TimeoutExpired:
        logger.error(f"Command timed out after {timeout}s: {' '.join(command)}")
        raise SpawnFailure(command, f"Command timed out after {timeout}s")
    except OSError as e:
        logger.error(f"Command execution failed: {' '.join(command)}: {e}")
        raise SpawnFailure(command, str(e)) from e

    return CommandResult(result.returncode, result.stdout or "", result.stderr or "")


def read_file_safe(file_path: str, default: str = "") -> str:
    """Safely read a file, returning default if it fails"""
    try:
        with open(file_path, 'r') as f:
            return f.read().strip()
    except OSError:
        return default


def find_executable(name: str) -> Optional[str]:
    """Find an executable in PATH or common locations"""
    if os.path.isabs(name):
        return name if os.path.isfile(name) and os.access(name, os.X_OK) else None

    path = shutil.which(name)
    if path:
        return path

    common_paths = [
        f"/usr/bin/{name}",
        f"/usr/local/bin/{name}",
        f"/usr/sbin/{name}",
        f"/sbin/{name}"
    ]

    for path in common_paths:
        if os.path.isfile(path) and os.access(path, os.X_OK):
            return path

    return None


class PanelError(Exception):
    """Base exception for PowerPanel errors; str() is the message shown to the user"""
    pass


class ConfigurationError(PanelError):
    """Configuration-related errors"""
    pass


class SpawnFailure(PanelError):
    """The child process could not be created or executed"""

    def __init__(self, command: List[str], message: str):
        super().__init__(message)
        self.command = list(command)


class ActionRejected(PanelError):
    """A privileged action ran but exited with a non-zero status"""

    def __init__(self, message: str, exit_code: int):
        super().__init__(message)
        self.exit_code = exit_code


class ElevationDenied(ActionRejected):
    """The elevation gate refused or the user dismissed the prompt"""
    pass


class ToolRejected(ActionRejected):
    """The elevated tool itself rejected the request"""
    pass
