"""Ordered, reversible scaffolding actions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from contracts.errors import FilesystemError, ScaffoldError

_LOGGER = logging.getLogger(__name__)

APPLIED = "applied"
SKIPPED = "skipped"
FAILED = "failed"
UNDONE = "undone"
UNDO_FAILED = "undo_failed"


class Skip(Exception):
    """Raised by an action's ``apply`` when there is nothing to do."""


@dataclass
class Action:
    """One scaffolding step.

    ``apply`` performs the mutation and may raise :class:`Skip`; ``undo``
    reverts it and is only called for actions that were applied.
    """

    name: str
    apply: Callable[[], Optional[str]]
    undo: Optional[Callable[[], None]] = None


@dataclass
class ActionOutcome:
    name: str
    status: str
    detail: str | None = None


@dataclass
class PlanReport:
    outcomes: List[ActionOutcome] = field(default_factory=list)

    def statuses(self) -> Dict[str, str]:
        return {outcome.name: outcome.status for outcome in self.outcomes}


EventSink = Callable[[Dict[str, Any]], Any]


class ActionPlan:
    """Execute actions in order, failing fast on the first error.

    With ``rollback`` the already applied actions are undone in reverse order
    before the original error propagates.  Undo failures are logged and
    reported but never replace the original error.
    """

    def __init__(
        self,
        actions: Sequence[Action],
        *,
        rollback: bool = False,
        on_event: EventSink | None = None,
    ) -> None:
        self._actions = list(actions)
        self._rollback = rollback
        self._on_event = on_event
        self.report = PlanReport()

    @property
    def names(self) -> List[str]:
        return [action.name for action in self._actions]

    def _record(self, name: str, status: str, detail: str | None = None, **extra: Any) -> None:
        self.report.outcomes.append(ActionOutcome(name=name, status=status, detail=detail))
        if self._on_event is not None:
            event: Dict[str, Any] = {"step": name, "status": status}
            if detail:
                event["detail"] = detail
            event.update(extra)
            self._on_event(event)

    def execute(self) -> PlanReport:
        applied: List[Action] = []
        for action in self._actions:
            try:
                detail = action.apply()
            except Skip as skip:
                _LOGGER.info("%s: skipped (%s)", action.name, skip)
                self._record(action.name, SKIPPED, str(skip) or None)
                continue
            except ScaffoldError as exc:
                if exc.step is None:
                    exc.step = action.name
                self._fail(action, exc, applied)
                raise
            except OSError as exc:
                wrapped = FilesystemError(f"{action.name}: {exc}", step=action.name, path=exc.filename)
                self._fail(action, wrapped, applied)
                raise wrapped from exc
            _LOGGER.info("%s: applied", action.name)
            self._record(action.name, APPLIED, detail)
            applied.append(action)
        return self.report

    def _fail(self, action: Action, exc: ScaffoldError, applied: List[Action]) -> None:
        _LOGGER.error("%s failed: %s", action.name, exc)
        self._record(action.name, FAILED, str(exc), error=exc.kind)
        if self._rollback:
            self._unwind(applied)

    def _unwind(self, applied: List[Action]) -> None:
        for action in reversed(applied):
            if action.undo is None:
                continue
            try:
                action.undo()
            except (OSError, ScaffoldError) as exc:
                _LOGGER.warning("Undo of %s failed: %s", action.name, exc)
                self._record(action.name, UNDO_FAILED, str(exc))
                continue
            _LOGGER.info("%s: undone", action.name)
            self._record(action.name, UNDONE)


__all__ = [
    "APPLIED",
    "Action",
    "ActionOutcome",
    "ActionPlan",
    "FAILED",
    "PlanReport",
    "SKIPPED",
    "Skip",
    "UNDONE",
    "UNDO_FAILED",
]
