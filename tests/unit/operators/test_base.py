"""Unit tests for the Operator base class."""

import subprocess
from unittest.mock import patch

from cryptdown.core.guards import ProtectedResourceSet
from cryptdown.models.context import TeardownContext
from cryptdown.models.step import StepResult
from cryptdown.operators.base import Operator
from cryptdown.utils.shell import CommandResult


class EchoOperator(Operator):
    """Minimal operator running one command."""

    @property
    def name(self) -> str:
        return "echo"

    def run(self, context: TeardownContext, protected: ProtectedResourceSet) -> StepResult:
        error = self._execute(["echo", "hi"], timeout=5.0)
        return StepResult.success() if error is None else StepResult.partial_failure(error)


class TestOperatorExecute:
    """Tests for Operator._execute."""

    def test_success(self, protected: ProtectedResourceSet) -> None:
        """A zero exit is no error."""
        with patch(
            "cryptdown.operators.base.run_command", return_value=CommandResult("hi\n", "", 0)
        ):
            assert EchoOperator().run(TeardownContext(), protected).ok

    def test_stderr_becomes_detail(self, protected: ProtectedResourceSet) -> None:
        """Command stderr is the failure description."""
        with patch(
            "cryptdown.operators.base.run_command",
            return_value=CommandResult("", "permission denied\n", 1),
        ):
            result = EchoOperator().run(TeardownContext(), protected)

        assert result.detail == "permission denied"

    def test_timeout_is_not_raised(self, protected: ProtectedResourceSet) -> None:
        """Timeouts are folded into the result."""
        with patch(
            "cryptdown.operators.base.run_command",
            side_effect=subprocess.TimeoutExpired("echo", 5.0),
        ):
            result = EchoOperator().run(TeardownContext(), protected)

        assert result.detail == "timed out after 5s"

    def test_missing_binary(self, protected: ProtectedResourceSet) -> None:
        """A missing executable is folded into the result."""
        with patch(
            "cryptdown.operators.base.run_command",
            side_effect=FileNotFoundError("No such file or directory: 'echo'"),
        ):
            result = EchoOperator().run(TeardownContext(), protected)

        assert result.ok is False


class TestAsStep:
    """Tests for Operator.as_step."""

    def test_wraps_run(self) -> None:
        """The step carries name, title and executor."""
        operator = EchoOperator(dry_run=True)
        step = operator.as_step()

        assert step.name == "echo"
        assert step.label == "echo"
        assert step.compensable is False
        assert operator.dry_run is True
