"""Check registry with auto-discovery of PlanCheck subclasses."""

from __future__ import annotations

import importlib
import logging
import pkgutil
from pathlib import Path

from planning_engine.validation.base import PlanCheck

logger = logging.getLogger(__name__)


class CheckRegistry:
    """Discovers and manages all PlanCheck implementations.

    Auto-discovers checks by scanning the checks/ package tree for any
    concrete subclasses of PlanCheck. New checks are added by placing a
    .py file in the appropriate family subpackage.
    """

    def __init__(self) -> None:
        self._checks: dict[str, PlanCheck] = {}

    def discover_checks(self) -> None:
        """Scan the checks package tree and register all PlanCheck subclasses."""
        import planning_engine.validation.checks as checks_pkg

        checks_path = Path(checks_pkg.__file__).parent  # type: ignore[arg-type]
        self._scan_package(checks_pkg.__name__, str(checks_path))

    def _scan_package(self, package_name: str, package_path: str) -> None:
        """Recursively import all modules under a package and register checks."""
        for _, module_name, _ in pkgutil.walk_packages([package_path], prefix=package_name + "."):
            try:
                module = importlib.import_module(module_name)
            except ImportError:
                logger.exception("Could not import check module %s", module_name)
                continue

            for attr_name in dir(module):
                attr = getattr(module, attr_name)
                if (
                    isinstance(attr, type)
                    and issubclass(attr, PlanCheck)
                    and attr is not PlanCheck
                    and not getattr(attr, "__abstractmethods__", set())
                ):
                    self.register(attr())

    def register(self, check: PlanCheck) -> None:
        """Register a check instance by its check_id."""
        self._checks[check.check_id] = check

    def get(self, check_id: str) -> PlanCheck | None:
        return self._checks.get(check_id)

    def get_all_checks(self) -> list[PlanCheck]:
        """All registered checks in run order: by family, then by check_id."""
        return sorted(self._checks.values(), key=lambda c: (c.family, c.check_id))

    @property
    def check_ids(self) -> list[str]:
        return list(self._checks.keys())
