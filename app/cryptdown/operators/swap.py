"""Swap and zram teardown operator."""

import logging

from cryptdown.core.guards import ProtectedResourceSet
from cryptdown.models.context import TeardownContext
from cryptdown.models.step import StepResult
from cryptdown.operators.base import Operator

logger = logging.getLogger(__name__)


class SwapOperator(Operator):
    """Disables all swap, then resets every zram device.

    Swap must be off first: the kernel refuses to reset a zram device
    that is still in use as swap.
    """

    @property
    def name(self) -> str:
        return "swap-teardown"

    @property
    def title(self) -> str:
        return "Disable swap and reset zram"

    def run(self, context: TeardownContext, protected: ProtectedResourceSet) -> StepResult:
        swaps = list(context.swap_devices)
        zrams = list(context.zram_devices)
        if not swaps and not zrams:
            return StepResult.skipped("no active swap or zram devices")

        if self.dry_run:
            planned = (["swapoff -a"] if swaps else []) + [f"reset {z}" for z in zrams]
            return self._dry_run_result("run", planned)

        failed: list[str] = []
        handled: list[str] = []

        if swaps:
            self.reporter.info(f"Disabling swap: {', '.join(swaps)}")
            error = self._execute(["swapoff", "-a"], timeout=300.0)
            if error is None:
                handled.extend(swaps)
            else:
                self.reporter.warn(f"swapoff returned non-zero: {error}")
                failed.append("swapoff -a")

        if zrams:
            self.reporter.info("Resetting zram devices…")
            for device in zrams:
                if device in swaps:
                    # Redundant after swapoff -a; harmless if already off
                    self._execute(["swapoff", device], timeout=300.0)
                error = self._execute(["zramctl", "--reset", device], timeout=60.0)
                if error is None:
                    handled.append(device)
                else:
                    self.reporter.warn(f"zram reset incomplete on {device}: {error}")
                    failed.append(device)

        return StepResult.from_failures("tear down", failed, handled)
