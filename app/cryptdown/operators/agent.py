"""SSH agent key clearing operator."""

import logging
import os
import socket
import stat

from cryptdown.core.guards import ProtectedResourceSet
from cryptdown.models.context import TeardownContext
from cryptdown.models.step import StepResult
from cryptdown.operators.base import Operator

logger = logging.getLogger(__name__)

_CONNECT_TIMEOUT_SECONDS = 2.0


def is_socket(path: str) -> bool:
    """Check if path exists and is a Unix socket."""
    try:
        return stat.S_ISSOCK(os.stat(path).st_mode)
    except OSError:
        return False


def can_connect(path: str, timeout: float = _CONNECT_TIMEOUT_SECONDS) -> bool:
    """Check if a Unix socket accepts connections."""
    try:
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
            sock.settimeout(timeout)
            sock.connect(path)
    except OSError as e:
        logger.debug("Agent socket %s not connectable: %s", path, e)
        return False
    return True


class CredentialAgentOperator(Operator):
    """Removes all identities held by a reachable ssh-agent.

    A missing or dead agent socket is not an error: there are no keys
    to clear.
    """

    @property
    def name(self) -> str:
        return "credential-clear"

    @property
    def title(self) -> str:
        return "Clear ssh-agent keys"

    def run(self, context: TeardownContext, protected: ProtectedResourceSet) -> StepResult:
        sock = context.agent_socket
        if not sock or not is_socket(sock):
            return StepResult.success("no agent socket")
        if not can_connect(sock):
            return StepResult.success(f"agent socket {sock} not connectable")

        if self.dry_run:
            return self._dry_run_result("clear agent keys", [sock])

        self.reporter.info("Clearing ssh-agent keys…")
        error = self._execute(["ssh-add", "-D"], timeout=15.0, env={"SSH_AUTH_SOCK": sock})
        if error is not None:
            self.reporter.warn(f"Could not clear agent keys: {error}")
            return StepResult.partial_failure(f"ssh-add -D failed: {error}", failed=(sock,))
        return StepResult.success(handled=(sock,))
