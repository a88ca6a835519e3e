from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Optional

from ..common.timerange import extend, within
from ..core.constants import DEFAULT_GRACE_MINUTES
from ..core.enums import ClassState, Reason, Weekday
from ..schedules.model import ScheduleSlot

_REASON_TEXT = {
    Reason.NOT_SCHEDULED_TODAY: "not scheduled today",
    Reason.NOT_YET_STARTED: "not yet started",
    Reason.WINDOW_EXPIRED: "window expired",
}


@dataclass(frozen=True)
class GateDecision:
    state: ClassState
    eligible: bool
    reason: Optional[Reason] = None
    ms_remaining: int = 0
    grace_end: Optional[time] = None

    @property
    def message(self) -> str:
        return _REASON_TEXT.get(self.reason, "") if self.reason else ""


@dataclass
class AttendanceGate:
    """Decides whether attendance may be marked for a slot right now.

    Recomputed on every call from the wall clock: NOT_YET_STARTED, then
    IN_WINDOW over [start, end + grace], then EXPIRED. Whether a batch was
    already recorded is the recorder's concern.
    """

    grace_minutes: int = DEFAULT_GRACE_MINUTES

    def evaluate(self, slot: ScheduleSlot, now: datetime, grace_minutes: Optional[int] = None) -> GateDecision:
        grace = self.grace_minutes if grace_minutes is None else int(grace_minutes)

        if Weekday.of(now) != slot.day:
            return GateDecision(state=ClassState.NOT_SCHEDULED_TODAY, eligible=False, reason=Reason.NOT_SCHEDULED_TODAY)

        grace_end = extend(slot.end_time, grace)
        # Minute precision: 10:05:40 still counts as 10:05.
        current = now.time().replace(second=0, microsecond=0)

        if within(current, slot.start_time, grace_end):
            # The window closes when the minute after grace_end begins.
            closes_at = datetime.combine(now.date(), grace_end.replace(second=0, microsecond=0)) + timedelta(minutes=1)
            deadline = closes_at.replace(tzinfo=now.tzinfo)
            ms_remaining = max(0, int((deadline - now).total_seconds() * 1000))
            return GateDecision(
                state=ClassState.IN_WINDOW,
                eligible=True,
                ms_remaining=ms_remaining,
                grace_end=grace_end,
            )

        if current < slot.start_time:
            return GateDecision(
                state=ClassState.NOT_YET_STARTED,
                eligible=False,
                reason=Reason.NOT_YET_STARTED,
                grace_end=grace_end,
            )

        return GateDecision(
            state=ClassState.EXPIRED,
            eligible=False,
            reason=Reason.WINDOW_EXPIRED,
            grace_end=grace_end,
        )
