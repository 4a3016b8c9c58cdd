from __future__ import annotations
from pydantic import BaseModel
from typing import Literal
from uuid import UUID

ContestStatus = Literal["draft", "active", "ended", "archived"]
CountdownKind = Literal["remaining", "until_start"]

class ContestStatusPublic(BaseModel):
    contest_id: UUID
    status: ContestStatus
    label: str
    persisted_status: str

class DurationPublic(BaseModel):
    days: int
    hours: int
    minutes: int
    seconds: int

class CountdownPublic(BaseModel):
    contest_id: UUID
    status: ContestStatus
    kind: CountdownKind | None = None
    duration: DurationPublic | None = None
    display: str = ""
