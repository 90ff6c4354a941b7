"""
Host Query Capabilities
Read-only host lookups as typed queries with an explicit failure policy.

Each query names the command it spawns and how its text output is turned
into a field value. The policy decides what a failure costs:

- LOAD_BEARING: a spawn failure propagates as SpawnFailure; a query that
  ran but printed nothing yields an empty string.
- BEST_EFFORT: a spawn failure or blank output yields the fallback value.

Process execution goes through an injectable runner with the signature of
panel_utils.run_command, so tests never touch real host processes.
"""
import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from panel_enums import QueryPolicy
from panel_utils import CommandResult, SpawnFailure, run_command

logger = logging.getLogger(__name__)

UNKNOWN = "unknown"

CommandRunner = Callable[..., CommandResult]


class HostQuery(ABC):
    """Abstract base class for a single read-only host lookup"""

    def __init__(self, name: str, policy: QueryPolicy, fallback: str = UNKNOWN,
                 timeout: Optional[float] = None):
        self.name = name
        self.policy = policy
        self.fallback = fallback
        self.timeout = timeout

    @abstractmethod
    def command(self) -> List[str]:
        """Argument vector of the process to spawn"""
        pass

    def parse(self, stdout: str) -> str:
        """Extract the field value from the raw output"""
        return stdout

    def execute(self, runner: CommandRunner = run_command) -> str:
        """Run the query and return its trimmed value under this query's policy"""
        argv = self.command()
        try:
            result = runner(argv, timeout=self.timeout)
        except SpawnFailure as e:
            if self.policy is QueryPolicy.LOAD_BEARING:
                logger.error(f"{self.name}: could not run {argv[0]}: {e}")
                raise
            logger.warning(f"{self.name}: could not run {argv[0]}, using '{self.fallback}': {e}")
            return self.fallback

        value = self.parse(result.stdout).strip()
        if not value and self.policy is QueryPolicy.BEST_EFFORT:
            logger.debug(f"{self.name}: no output (exit {result.returncode}), using '{self.fallback}'")
            return self.fallback
        return value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, {self.policy.value})"


class CommandQuery(HostQuery):
    """Query answered by a host CLI tool's standard output"""

    def __init__(self, name: str, argv: List[str], policy: QueryPolicy = QueryPolicy.BEST_EFFORT,
                 fallback: str = UNKNOWN, timeout: Optional[float] = None):
        super().__init__(name, policy, fallback, timeout)
        self.argv = list(argv)

    def command(self) -> List[str]:
        return list(self.argv)


class SysfsQuery(HostQuery):
    """Query answered by the content of a sysfs-style attribute file"""

    def __init__(self, name: str, path: str, policy: QueryPolicy = QueryPolicy.BEST_EFFORT,
                 fallback: str = UNKNOWN, timeout: Optional[float] = None):
        super().__init__(name, policy, fallback, timeout)
        self.path = path

    def command(self) -> List[str]:
        # A missing attribute makes cat exit non-zero with empty stdout,
        # which is a content failure rather than a spawn failure.
        return ["cat", self.path]


class CpuInfoQuery(HostQuery):
    """CPU model name from the first "model name" line of a cpuinfo source"""

    LABEL = "model name"

    def __init__(self, path: str = "/proc/cpuinfo", policy: QueryPolicy = QueryPolicy.LOAD_BEARING,
                 timeout: Optional[float] = None):
        super().__init__("cpu_model", policy, UNKNOWN, timeout)
        self.path = path

    def command(self) -> List[str]:
        return ["grep", "-m1", self.LABEL, self.path]

    def parse(self, stdout: str) -> str:
        for line in stdout.splitlines():
            if line.startswith(self.LABEL):
                _, _, model = line.partition(':')
                return model
        return ""
