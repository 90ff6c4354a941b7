"""
Shared pytest fixtures for PowerPanel tests.

Host processes are never spawned here: components receive a FakeRunner
that answers each command from a table of canned results.
"""
import threading
from typing import Dict, List, Union

import pytest

from panel_settings import PanelSettings, reset_settings_instance
from panel_utils import CommandResult, SpawnFailure

CPUINFO = (
    "processor\t: 0\n"
    "vendor_id\t: AuthenticAMD\n"
    "model name\t: AMD Ryzen 7 7840HS w/ Radeon 780M Graphics\n"
)

BATTERY_DIR = "/sys/class/power_supply/BAT0"
BOOST_PATH = "/sys/devices/system/cpu/cpufreq/boost"


class FakeRunner:
    """Stands in for panel_utils.run_command.

    Responses are keyed by program name, or by file path for ``cat``.
    An unknown program fails to spawn; ``cat`` on an unknown path runs and
    prints nothing, the way it behaves for a missing sysfs attribute.
    """

    def __init__(self):
        self.responses: Dict[str, Union[CommandResult, SpawnFailure]] = {}
        self.calls: List[List[str]] = []
        self._lock = threading.Lock()

    def respond(self, key: str, stdout: str = "", returncode: int = 0, stderr: str = ""):
        self.responses[key] = CommandResult(returncode, stdout, stderr)

    def fail_spawn(self, key: str, message: str = "[Errno 2] No such file or directory"):
        self.responses[key] = SpawnFailure([key], message)

    def __call__(self, argv, timeout=None):
        with self._lock:
            self.calls.append(list(argv))

        program = argv[0]
        response = self.responses.get(program)
        if response is None and program == "cat":
            response = self.responses.get(argv[-1], CommandResult(1, "", f"cat: {argv[-1]}: No such file"))
        if response is None:
            response = SpawnFailure(argv, f"[Errno 2] No such file or directory: '{program}'")

        if isinstance(response, SpawnFailure):
            raise response
        return response

    def commands_for(self, program: str) -> List[List[str]]:
        return [call for call in self.calls if call[0] == program]


@pytest.fixture(autouse=True)
def isolated_settings_dir(tmp_path, monkeypatch):
    """Keep every settings file inside the test's temporary directory."""
    monkeypatch.setenv("POWERPANEL_CONFIG_DIR", str(tmp_path / "config"))
    reset_settings_instance()
    yield
    reset_settings_instance()


@pytest.fixture
def settings(tmp_path) -> PanelSettings:
    return PanelSettings(str(tmp_path / "config"))


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def healthy_host(runner) -> FakeRunner:
    """A host where every tool is installed and answers."""
    runner.respond("grep", stdout=CPUINFO.splitlines()[2] + "\n")
    runner.respond(BOOST_PATH, stdout="1\n")
    runner.respond("supergfxctl", stdout="Hybrid\n")
    runner.respond("powerprofilesctl", stdout="balanced\n")
    runner.respond(f"{BATTERY_DIR}/capacity", stdout="87\n")
    runner.respond(f"{BATTERY_DIR}/status", stdout="Discharging\n")
    return runner
