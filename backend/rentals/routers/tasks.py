# backend/rentals/routers/tasks.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import case, delete, func, select
from sqlalchemy.orm import Session

from ..auth import Principal, get_principal, require_edit_property, require_view_property
from ..db import get_db
from ..domain.events import emit_workflow_event
from ..models import PropertyTask
from ..schemas import TaskOut, TaskUpsert
from ..services.ownership import must_get_property
from ..services.upserts import upsert_row

router = APIRouter(prefix="/properties", tags=["tasks"])


def completed_at_update(is_completed: bool, now: datetime) -> Any:
    """
    completed_at for the ON CONFLICT branch, evaluated against the existing row:
    stamped when a task becomes completed, kept while it stays completed,
    cleared when it is reopened.
    """
    if not is_completed:
        return None
    return case(
        (PropertyTask.is_completed.is_(True), func.coalesce(PropertyTask.completed_at, now)),
        else_=now,
    )


@router.get("/{property_unique_id}/tasks")
def list_tasks(
    property_unique_id: str,
    phase: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
    p: Principal = Depends(get_principal),
):
    require_view_property(p, property_unique_id)
    must_get_property(db, property_unique_id=property_unique_id)

    q = select(PropertyTask).where(PropertyTask.property_id == property_unique_id)
    if phase:
        q = q.where(PropertyTask.phase == phase)
    rows = db.scalars(q.order_by(PropertyTask.created_at.asc(), PropertyTask.id.asc())).all()
    return {"tasks": [TaskOut.model_validate(r) for r in rows]}


@router.post("/{property_unique_id}/tasks")
def upsert_task(
    property_unique_id: str,
    payload: TaskUpsert,
    db: Session = Depends(get_db),
    p: Principal = Depends(get_principal),
):
    require_edit_property(p, property_unique_id)
    must_get_property(db, property_unique_id=property_unique_id)

    now = datetime.utcnow()
    sent = payload.model_fields_set
    is_completed = payload.is_completed if "is_completed" in sent else None

    values: dict[str, Any] = {
        "is_completed": bool(is_completed),
        "completed_at": now if is_completed else None,
        "task_data": payload.task_data if "task_data" in sent else None,
        "created_at": now,
        "updated_at": now,
    }
    update_set: dict[str, Any] = {"updated_at": now}
    if is_completed is not None:
        update_set["is_completed"] = is_completed
        update_set["completed_at"] = completed_at_update(is_completed, now)
    if "task_data" in sent:
        update_set["task_data"] = payload.task_data

    row = upsert_row(
        db,
        PropertyTask,
        key={"property_id": property_unique_id, "phase": payload.phase, "task_type": payload.task_type},
        values=values,
        update_set=update_set,
    )
    emit_workflow_event(
        db,
        principal=p,
        event_type="task.upserted",
        property_id=property_unique_id,
        payload={"phase": row.phase, "task_type": row.task_type, "is_completed": row.is_completed},
    )
    db.commit()
    db.refresh(row)
    return {"task": TaskOut.model_validate(row)}


@router.delete("/{property_unique_id}/tasks")
def delete_task(
    property_unique_id: str,
    phase: Optional[str] = Query(default=None),
    task_type: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
    p: Principal = Depends(get_principal),
):
    if not phase or not task_type:
        raise HTTPException(status_code=400, detail="phase and task_type are required")

    require_edit_property(p, property_unique_id)
    must_get_property(db, property_unique_id=property_unique_id)

    db.execute(
        delete(PropertyTask).where(
            PropertyTask.property_id == property_unique_id,
            PropertyTask.phase == phase,
            PropertyTask.task_type == task_type,
        )
    )
    db.commit()
    return {"success": True}
