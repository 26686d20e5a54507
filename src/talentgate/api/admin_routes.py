from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from talentgate.api.deps import get_db, get_staff_user
from talentgate.api.schemas import (
    ApplicationListResponse,
    ExportRequest,
    ExportResponse,
    FavoriteItem,
    FavoriteListResponse,
    FavoriteResponse,
    PublicToggleRequest,
    ShareResponse,
    StatusUpdateRequest,
)
from talentgate.core.admin_query import (
    ApplicationQuery,
    get_application_detail,
    is_favorite,
    list_applications,
    list_favorites,
    set_status,
    toggle_favorite,
)
from talentgate.core.errors import NotFoundError, TokenMintingError
from talentgate.core.export import export_applications
from talentgate.core.sharing import set_public
from talentgate.types import ApplicationDetail, ApplicationSummary

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(get_staff_user)])


@router.get("/applications", response_model=ApplicationListResponse)
def admin_list_applications(
    query: Annotated[ApplicationQuery, Query()],
    db: Session = Depends(get_db),
) -> ApplicationListResponse:
    page = list_applications(db, query)
    return ApplicationListResponse(
        applications=[ApplicationSummary.model_validate(row) for row in page.applications],
        total=page.total,
        limit=page.limit,
        offset=page.offset,
    )


@router.get("/applications/{application_id}", response_model=ApplicationDetail)
def admin_get_application(application_id: str, db: Session = Depends(get_db)) -> ApplicationDetail:
    try:
        application = get_application_detail(db, application_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return ApplicationDetail.model_validate(application)


@router.patch("/applications/{application_id}/status", response_model=ApplicationSummary)
def admin_set_status(
    application_id: str,
    payload: StatusUpdateRequest,
    db: Session = Depends(get_db),
) -> ApplicationSummary:
    try:
        application = set_status(db, application_id, payload.status)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return ApplicationSummary.model_validate(application)


@router.post("/applications/{application_id}/public", response_model=ShareResponse)
def admin_toggle_public(
    application_id: str,
    payload: PublicToggleRequest,
    db: Session = Depends(get_db),
) -> ShareResponse:
    try:
        state = set_public(db, application_id, payload.is_public)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except TokenMintingError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return ShareResponse(
        application_id=state.application_id,
        is_public=state.is_public,
        shareable_url=state.shareable_url,
    )


@router.post("/applications/{application_id}/favorite", response_model=FavoriteResponse)
def admin_toggle_favorite(
    application_id: str,
    user_id: str = Depends(get_staff_user),
    db: Session = Depends(get_db),
) -> FavoriteResponse:
    try:
        state = toggle_favorite(db, user_id, application_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return FavoriteResponse(application_id=application_id, is_favorite=state)


@router.get("/applications/{application_id}/favorite", response_model=FavoriteResponse)
def admin_favorite_status(
    application_id: str,
    user_id: str = Depends(get_staff_user),
    db: Session = Depends(get_db),
) -> FavoriteResponse:
    return FavoriteResponse(application_id=application_id, is_favorite=is_favorite(db, user_id, application_id))


@router.get("/favorites", response_model=FavoriteListResponse)
def admin_list_favorites(
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
) -> FavoriteListResponse:
    page = list_favorites(db, limit=limit, offset=offset)
    return FavoriteListResponse(
        favorites=[
            FavoriteItem(
                application=ApplicationSummary.model_validate(entry.application),
                favorited_by=entry.favorited_by,
                favorited_at=entry.favorited_at,
            )
            for entry in page.favorites
        ],
        total=page.total,
        limit=page.limit,
        offset=page.offset,
    )


@router.post("/export", response_model=ExportResponse)
def admin_export(payload: ExportRequest, db: Session = Depends(get_db)) -> ExportResponse:
    result = export_applications(
        db,
        payload.format,
        filter_status=payload.filter_status,
        filter_category=payload.filter_category,
    )
    return ExportResponse(format=result.format, data=result.data)
