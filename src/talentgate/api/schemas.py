from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from talentgate.types import ApplicationSummary, ExportFormat


class EmailAvailabilityResponse(BaseModel):
    email: str
    available: bool


class SubmissionResponse(BaseModel):
    id: str
    email: str
    message: str


class FieldErrorItem(BaseModel):
    path: str
    message: str
    step: int | None = None


class StepValidationResponse(BaseModel):
    step: int
    valid: bool
    first_step: int | None = None
    errors: list[FieldErrorItem] = Field(default_factory=list)


class ApplicationListResponse(BaseModel):
    applications: list[ApplicationSummary]
    total: int
    limit: int
    offset: int


class StatusUpdateRequest(BaseModel):
    status: Literal["active", "archived"]


class PublicToggleRequest(BaseModel):
    is_public: bool


class ShareResponse(BaseModel):
    application_id: str
    is_public: bool
    shareable_url: str | None = None


class FavoriteResponse(BaseModel):
    application_id: str
    is_favorite: bool


class FavoriteItem(BaseModel):
    application: ApplicationSummary
    favorited_by: str
    favorited_at: datetime


class FavoriteListResponse(BaseModel):
    favorites: list[FavoriteItem]
    total: int
    limit: int
    offset: int


class ExportRequest(BaseModel):
    format: ExportFormat = "csv"
    filter_status: str | None = None
    filter_category: str | None = None


class ExportResponse(BaseModel):
    format: ExportFormat
    data: str


class UploadResponse(BaseModel):
    url: str
    file_name: str
    size: int
    type: str
