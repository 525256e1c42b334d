"""Mount tree teardown operator."""

import logging
from collections.abc import Callable

from cryptdown.core.guards import ProtectedResourceSet
from cryptdown.core.reporting import StatusReporter
from cryptdown.models.context import MountTree, TeardownContext
from cryptdown.models.step import StepResult
from cryptdown.operators.base import Operator
from cryptdown.scanners.mounts import is_mounted

logger = logging.getLogger(__name__)


def filter_targets(tree: MountTree, protected: ProtectedResourceSet) -> list[str]:
    """Drop protected mount points from a tree, keeping deepest-first order.

    Args:
        tree: Mount targets found under one base path.
        protected: Protected resource set.

    Returns:
        Targets that may be unmounted.
    """
    return [t for t in tree.targets if not protected.is_protected_mount(t)]


class UnmountOperator(Operator):
    """Unmounts everything below the watched base paths.

    Base paths are processed in snapshot order (generic trees, then the
    removable-media path) and targets deepest first. Each target gets a
    recursive unmount, then a plain unmount as fallback. Targets that are
    no longer mounted are treated as done.
    """

    def __init__(
        self,
        mount_check: Callable[[str], bool] | None = None,
        dry_run: bool = False,
        reporter: StatusReporter | None = None,
    ) -> None:
        """Initialize the operator.

        Args:
            mount_check: Returns True while a target is still mounted
                (default: the live mount table).
            dry_run: If True, only report what would be unmounted.
            reporter: Status stream for advisory messages.
        """
        super().__init__(dry_run=dry_run, reporter=reporter)
        self._mount_check = mount_check if mount_check is not None else is_mounted

    @property
    def name(self) -> str:
        return "unmount"

    @property
    def title(self) -> str:
        return "Unmount watched trees"

    def run(self, context: TeardownContext, protected: ProtectedResourceSet) -> StepResult:
        failed: list[str] = []
        unmounted: list[str] = []

        for tree in context.mount_trees:
            skipped = [t for t in tree.targets if protected.is_protected_mount(t)]
            for target in skipped:
                logger.info("Leaving protected mount %s in place", target)

            targets = [t for t in filter_targets(tree, protected) if self._mount_check(t)]
            if not targets:
                continue

            if self.dry_run:
                unmounted.extend(targets)
                continue

            self.reporter.info(f"Unmounting under {tree.base}…")
            for target in targets:
                if self._unmount(target):
                    unmounted.append(target)
                else:
                    self.reporter.warn(f"could not umount {target}")
                    failed.append(target)

        if self.dry_run:
            return self._dry_run_result("unmount", unmounted)
        if not failed and not unmounted:
            return StepResult.success("nothing mounted under watched trees")
        return StepResult.from_failures("unmount", failed, unmounted)

    def _unmount(self, target: str) -> bool:
        """Unmount one target, recursive first then plain."""
        if self._execute(["umount", "-R", target], timeout=60.0) is None:
            return True
        if not self._mount_check(target):
            # A recursive unmount can fail on a submount yet still detach the target
            return True
        return self._execute(["umount", target], timeout=60.0) is None
