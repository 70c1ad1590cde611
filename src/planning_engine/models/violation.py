"""Violation: a single blocking finding reported by the plan validator."""

from __future__ import annotations

from dataclasses import dataclass

from planning_engine.models.enums import ViolationCode


@dataclass(frozen=True)
class Violation:
    """A rule violation. There is no severity: every violation blocks the plan."""

    code: ViolationCode
    message: str
    session_id: str | None = None

    def to_dict(self) -> dict:
        data = {"code": self.code.value, "message": self.message}
        if self.session_id is not None:
            data["session_id"] = self.session_id
        return data
