from __future__ import annotations
from pydantic import BaseModel


class SyncRunPublic(BaseModel):
    success: bool
    updated: int
    failed: int
    skipped: int
    total: int


class SyncErrorPublic(BaseModel):
    success: bool = False
    error: str


class SyncEnqueued(BaseModel):
    job_id: str
    queue: str
