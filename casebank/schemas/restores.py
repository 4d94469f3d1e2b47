from typing import Any

from pydantic import BaseModel, Field


class BackupElementPayload(BaseModel):
    path: str = Field(min_length=1)
    attributes: dict[str, Any] = Field(default_factory=dict)


class RestoreRequest(BaseModel):
    scope_id: int = Field(ge=0)
    actor_user_id: int = Field(ge=1)
    include_user_data: bool | None = None
    same_site_users: bool | None = None
    user_mapping: dict[int, int] = Field(default_factory=dict)
    restore_token: str | None = Field(default=None, max_length=64)
    elements: list[BackupElementPayload]


class DiagnosticOut(BaseModel):
    kind: str
    oldId: int | None
    reason: str
    detail: str


class RestoreResultOut(BaseModel):
    restoreToken: str
    state: str
    inserted: dict[str, int]
    dropped: dict[str, int]
    reusedCategories: int
    skippedElements: int
    filesRelinked: dict[str, int]
    diagnostics: list[DiagnosticOut]
