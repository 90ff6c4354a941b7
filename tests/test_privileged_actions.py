"""Tests for elevated GPU mode and power profile actions."""
import pytest

from panel_utils import ActionRejected, ElevationDenied, PanelError, SpawnFailure, ToolRejected
from privileged_actions import GPU_MODE_FAILED, PROFILE_FAILED, PrivilegedActionDispatcher


@pytest.fixture
def dispatcher(settings, runner):
    return PrivilegedActionDispatcher(settings, runner)


class TestSetGpuMode:

    def test_success_on_zero_exit(self, dispatcher, runner):
        runner.respond("pkexec", returncode=0)
        assert dispatcher.set_gpu_mode("integrated") is None
        assert runner.calls == [["pkexec", "supergfxctl", "-m", "integrated"]]

    @pytest.mark.parametrize("mode", ["integrated", "Hybrid", "not-a-real-mode", ""])
    def test_non_zero_exit_has_fixed_message(self, dispatcher, runner, mode):
        runner.respond("pkexec", returncode=1, stderr="supergfxctl: invalid mode")
        with pytest.raises(ActionRejected) as excinfo:
            dispatcher.set_gpu_mode(mode)
        assert str(excinfo.value) == GPU_MODE_FAILED == "Failed to set GPU mode"
        assert runner.calls == [["pkexec", "supergfxctl", "-m", mode]]

    def test_tool_rejection_carries_exit_code(self, dispatcher, runner):
        runner.respond("pkexec", returncode=3)
        with pytest.raises(ToolRejected) as excinfo:
            dispatcher.set_gpu_mode("Dedicated")
        assert excinfo.value.exit_code == 3

    @pytest.mark.parametrize("code", [126, 127])
    def test_elevation_denied(self, dispatcher, runner, code):
        runner.respond("pkexec", returncode=code)
        with pytest.raises(ElevationDenied) as excinfo:
            dispatcher.set_gpu_mode("Integrated")
        assert excinfo.value.exit_code == code
        assert str(excinfo.value) == "Failed to set GPU mode"

    def test_elevation_gate_missing(self, dispatcher, runner):
        runner.fail_spawn("pkexec", "[Errno 2] No such file or directory: 'pkexec'")
        with pytest.raises(SpawnFailure) as excinfo:
            dispatcher.set_gpu_mode("Integrated")
        assert "No such file or directory" in str(excinfo.value)
        assert isinstance(excinfo.value, PanelError)


class TestSetProfile:

    def test_success_on_zero_exit(self, dispatcher, runner):
        runner.respond("pkexec", returncode=0)
        dispatcher.set_profile("quiet")
        assert runner.calls == [["pkexec", "/usr/local/bin/powerctl-helper", "quiet"]]

    @pytest.mark.parametrize("name", ["performance", "power-saver", "quiet", "x; rm -rf /"])
    def test_names_pass_through_unchanged(self, dispatcher, runner, name):
        runner.respond("pkexec", returncode=0)
        dispatcher.set_profile(name)
        assert runner.calls[-1][-1] == name
        assert len(runner.calls[-1]) == 3

    def test_non_zero_exit(self, dispatcher, runner):
        runner.respond("pkexec", returncode=2)
        with pytest.raises(ToolRejected) as excinfo:
            dispatcher.set_profile("quiet")
        assert str(excinfo.value) == PROFILE_FAILED == "Failed to apply profile"

    def test_helper_and_gate_from_settings(self, settings, runner):
        settings.update_multiple({"elevation_command": "doas", "profile_helper_path": "/opt/powerctl"})
        runner.respond("doas", returncode=0)
        PrivilegedActionDispatcher(settings, runner).set_profile("balanced")
        assert runner.calls == [["doas", "/opt/powerctl", "balanced"]]
