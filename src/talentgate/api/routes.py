from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.orm import Session

from talentgate.api.deps import get_db
from talentgate.api.schemas import (
    EmailAvailabilityResponse,
    FieldErrorItem,
    StepValidationResponse,
    SubmissionResponse,
    UploadResponse,
)
from talentgate.core.errors import ConflictError, NotFoundError, UploadRejected, ValidationFailed
from talentgate.core.form_schema import TOTAL_STEPS, step_for_path, validate_step
from talentgate.core.sharing import get_public_application
from talentgate.core.submission import SubmissionService
from talentgate.core.uploads import read_upload, store_upload
from talentgate.db.repositories import Repository
from talentgate.types import ApplicationDetail, CategoryView, UploadKind

router = APIRouter(prefix="/api", tags=["api"])


def validation_detail(exc: ValidationFailed) -> dict[str, Any]:
    return {
        "message": exc.message,
        "step": exc.first_step,
        "errors": [error.as_dict(step_for_path(error.path)) for error in exc.errors],
    }


@router.get("/categories", response_model=list[CategoryView])
def list_categories(db: Session = Depends(get_db)) -> list[CategoryView]:
    return [CategoryView.model_validate(row) for row in Repository(db).list_categories()]


@router.get("/applications/email-available", response_model=EmailAvailabilityResponse)
def email_available(email: str, db: Session = Depends(get_db)) -> EmailAvailabilityResponse:
    available = SubmissionService(db).is_email_available(email)
    return EmailAvailabilityResponse(email=email, available=available)


@router.post("/applications", response_model=SubmissionResponse, status_code=201)
def submit_application(
    payload: dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
) -> SubmissionResponse:
    try:
        receipt = SubmissionService(db).submit(payload)
    except ValidationFailed as exc:
        raise HTTPException(status_code=422, detail=validation_detail(exc)) from exc
    except ConflictError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return SubmissionResponse(id=receipt.id, email=receipt.email, message=receipt.message)


@router.post("/validate/{step}", response_model=StepValidationResponse)
def validate_form_step(step: int, payload: dict[str, Any] = Body(...)) -> StepValidationResponse:
    if not 1 <= step <= TOTAL_STEPS:
        raise HTTPException(status_code=404, detail=f"Unknown step {step}")
    result = validate_step(payload, step)
    return StepValidationResponse(
        step=step,
        valid=result.is_valid,
        first_step=result.first_step,
        errors=[FieldErrorItem.model_validate(item) for item in result.as_payload()],
    )


@router.get("/public/{token}", response_model=ApplicationDetail)
def public_application(token: str, db: Session = Depends(get_db)) -> ApplicationDetail:
    try:
        application = get_public_application(db, token)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return ApplicationDetail.model_validate(application)


@router.post("/upload", response_model=UploadResponse)
def upload_file(
    file: UploadFile = File(...),
    type: UploadKind = Form("resume"),
) -> UploadResponse:
    data = read_upload(file.file, type)
    try:
        stored = store_upload(file.filename, file.content_type, data, kind=type)
    except UploadRejected as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except OSError as exc:
        raise HTTPException(status_code=500, detail="Failed to upload file") from exc
    return UploadResponse(url=stored.url, file_name=stored.file_name, size=stored.size, type=stored.type)
