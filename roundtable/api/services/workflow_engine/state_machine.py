"""Meeting status transitions and post-step meeting updates."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, FrozenSet, Optional

from ...models.meeting import Meeting, MeetingStatus, TERMINAL_STATUSES
from .types import ExecutionResult

ALLOWED_TRANSITIONS: Dict[MeetingStatus, FrozenSet[MeetingStatus]] = {
    MeetingStatus.PENDING: frozenset({MeetingStatus.IN_PROGRESS, MeetingStatus.ERROR}),
    MeetingStatus.IN_PROGRESS: frozenset({
        MeetingStatus.IN_PROGRESS,
        MeetingStatus.WAITING,
        MeetingStatus.COMPLETED,
        MeetingStatus.ERROR,
    }),
    MeetingStatus.WAITING: frozenset({MeetingStatus.IN_PROGRESS, MeetingStatus.ERROR}),
    MeetingStatus.COMPLETED: frozenset(),
    MeetingStatus.ERROR: frozenset(),
}


class InvalidTransitionError(ValueError):
    def __init__(self, current: MeetingStatus, target: MeetingStatus):
        super().__init__(f"Invalid meeting status transition: {current.value} -> {target.value}")
        self.current = current
        self.target = target


def can_transition(current: MeetingStatus, target: MeetingStatus) -> bool:
    return MeetingStatus(target) in ALLOWED_TRANSITIONS[MeetingStatus(current)]


def ensure_transition(current: MeetingStatus, target: MeetingStatus) -> None:
    """Raise InvalidTransitionError unless current -> target is allowed."""
    if not can_transition(current, target):
        raise InvalidTransitionError(MeetingStatus(current), MeetingStatus(target))


def is_terminal(status: MeetingStatus) -> bool:
    return MeetingStatus(status) in TERMINAL_STATUSES


@dataclass(frozen=True)
class MeetingUpdate:
    """Fields the caller writes back after a successful advance."""

    current_step: int
    status: MeetingStatus
    final_conclusion: Optional[str] = None
    completed_at: Optional[datetime] = None

    def as_fields(self) -> Dict[str, object]:
        fields: Dict[str, object] = {
            "current_step": self.current_step,
            "status": self.status,
        }
        if self.final_conclusion is not None:
            fields["final_conclusion"] = self.final_conclusion
        if self.completed_at is not None:
            fields["completed_at"] = self.completed_at
        return fields


def plan_meeting_update(
    meeting: Meeting,
    result: ExecutionResult,
    *,
    now: Optional[datetime] = None,
) -> Optional[MeetingUpdate]:
    """
    Derive the meeting update for an engine result.

    Returns None when the step failed: the cursor and status stay as they
    are so the same step can be retried. Otherwise the cursor moves forward
    by exactly one and the status follows the handler's outcome.
    """
    if not result.success:
        return None

    ensure_transition(meeting.status, result.status)

    if result.status == MeetingStatus.COMPLETED:
        # End-of-workflow guard ran no step, so the cursor stays put.
        if not result.messages:
            return MeetingUpdate(
                current_step=meeting.current_step,
                status=MeetingStatus.COMPLETED,
                final_conclusion=meeting.final_conclusion,
                completed_at=meeting.completed_at or now or datetime.now(),
            )
        return MeetingUpdate(
            current_step=meeting.current_step + 1,
            status=MeetingStatus.COMPLETED,
            final_conclusion=result.messages[-1].content,
            completed_at=now or datetime.now(),
        )

    return MeetingUpdate(current_step=meeting.current_step + 1, status=result.status)
