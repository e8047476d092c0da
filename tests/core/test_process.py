"""
Unit tests for prebuildkit.core.process.
"""

from unittest.mock import MagicMock, patch

import pytest

from prebuildkit.core.exceptions import BuildStepError
from prebuildkit.core.process import run_command


class TestRunCommand:
    @patch("prebuildkit.core.process.subprocess.run")
    def test_success(self, mock_run, tmp_path):
        mock_run.return_value = MagicMock(returncode=0, stdout="ok", stderr="")

        result = run_command("build", ["make", "-j4"], cwd=tmp_path, env={"A": "1"})

        assert result.returncode == 0
        args, kwargs = mock_run.call_args
        assert args[0] == ["make", "-j4"]
        assert kwargs["cwd"] == str(tmp_path)
        assert kwargs["env"] == {"A": "1"}
        assert kwargs["capture_output"] is True

    @patch("prebuildkit.core.process.subprocess.run")
    def test_non_zero_exit_carries_output(self, mock_run):
        mock_run.return_value = MagicMock(
            returncode=2, stdout="checking...", stderr="error: no compiler"
        )

        with pytest.raises(BuildStepError) as exc_info:
            run_command("configure", ["python3", "waf-light", "configure"])

        error = exc_info.value
        assert error.step == "configure"
        assert error.returncode == 2
        assert error.stderr == "error: no compiler"
        assert "checking..." in error.diagnostic()
        assert error.diagnostic().endswith("error: no compiler")

    @patch("prebuildkit.core.process.subprocess.run")
    def test_cannot_start(self, mock_run):
        mock_run.side_effect = FileNotFoundError("cmake")

        with pytest.raises(BuildStepError, match="could not be started") as exc_info:
            run_command("configure", ["cmake", "-S", "."])

        assert exc_info.value.returncode is None

    @patch("prebuildkit.core.process.subprocess.run")
    def test_arguments_stringified(self, mock_run, tmp_path):
        mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")

        run_command("install", [tmp_path / "waf", "install"])

        assert mock_run.call_args[0][0] == [str(tmp_path / "waf"), "install"]
