"""Pending reminder endpoints."""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from scalekeeper.api import deps
from scalekeeper.models import ReminderCategory
from scalekeeper.schemas.reminder import ReminderRead
from scalekeeper.services import reminder_service

router = APIRouter()


@router.get("", response_model=list[ReminderRead], summary="List pending reminders")
async def list_reminders(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    category: ReminderCategory | None = Query(None),
) -> list[ReminderRead]:
    reminders = await reminder_service.list_pending(session, category=category)
    return [ReminderRead.model_validate(reminder) for reminder in reminders]
