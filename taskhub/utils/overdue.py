"""Overdue sweep: move open tasks whose end instant has passed to ``overdue``.

Each transition is a conditional update guarded by the open statuses, so a
concurrent user edit that completes the task wins over the sweep, and the
sweep can run concurrently with itself.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from taskhub.models.task import Task, TaskStatus
from taskhub.utils.access import OPEN_STATUSES, is_overdue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SweepResult:
    checked: int
    updated: int
    failed: int

    @property
    def message(self) -> str:
        return f"{self.updated} tasks updated to overdue"


def mark_overdue(db: Session, task_id: int) -> bool:
    """Conditionally flip one task to overdue. Returns False if its status moved on meanwhile."""
    changed = (
        db.query(Task)
        .filter(Task.id == task_id, Task.status.in_(OPEN_STATUSES))
        .update(
            {Task.status: TaskStatus.OVERDUE, Task.updated_at: datetime.now()},
            synchronize_session=False,
        )
    )
    db.commit()
    return changed > 0


def sweep_overdue(db: Session, now: Optional[datetime] = None) -> SweepResult:
    now = now or datetime.now()
    candidates = (
        db.query(Task.id, Task.status, Task.end_date, Task.end_time)
        .filter(Task.status.in_(OPEN_STATUSES))
        .all()
    )

    updated = failed = 0
    for row in candidates:
        if not is_overdue(row, now):
            continue
        task_id = row.id
        try:
            if mark_overdue(db, task_id):
                updated += 1
                logger.info("Task %s status updated to overdue", task_id)
        except SQLAlchemyError:
            # one bad row must not stop the rest of the pass
            db.rollback()
            failed += 1
            logger.exception("Error updating task %s to overdue", task_id)

    result = SweepResult(checked=len(candidates), updated=updated, failed=failed)
    logger.info("Overdue sweep: checked=%s updated=%s failed=%s", result.checked, result.updated, result.failed)
    return result


def _sweep_with_new_session(session_factory: Callable[[], Session]) -> SweepResult:
    db = session_factory()
    try:
        return sweep_overdue(db)
    finally:
        db.close()


async def run_overdue_sweeper(session_factory: Callable[[], Session], interval_seconds: float) -> None:
    """Run the sweep every ``interval_seconds`` until cancelled."""
    sleep_s = max(1.0, float(interval_seconds))
    logger.info("Background overdue sweep every %.0fs", sleep_s)
    while True:
        try:
            await run_in_threadpool(_sweep_with_new_session, session_factory)
        except Exception:
            logger.exception("Background overdue sweep failed")
        await asyncio.sleep(sleep_s)
