from __future__ import annotations

import json
from pathlib import Path

import typer
import uvicorn
from pydantic import ValidationError

from talentgate.api.app import create_app
from talentgate.cli.wizard import Wizard
from talentgate.config import get_settings
from talentgate.core.admin_query import (
    ApplicationQuery,
    get_application_detail,
    list_applications,
    toggle_favorite,
)
from talentgate.core.drafts import FileDraftStore
from talentgate.core.errors import NotFoundError, TokenMintingError
from talentgate.core.export import export_applications
from talentgate.core.sharing import set_public
from talentgate.core.submitters import HttpSubmitter, ServiceSubmitter
from talentgate.db.init import init_database
from talentgate.db.session import SessionLocal
from talentgate.logging_config import configure_logging
from talentgate.types import ApplicationDetail, ApplicationSummary

app = typer.Typer(help="TalentGate CLI")
admin_app = typer.Typer(help="Staff review commands")

app.add_typer(admin_app, name="admin")

_INITIALIZED = False


def ensure_initialized() -> None:
    global _INITIALIZED
    if _INITIALIZED:
        return
    init_database()
    _INITIALIZED = True


@app.command("init")
def init_cmd() -> None:
    """Initialize database, directories, and seed categories."""
    configure_logging()
    result = init_database()
    typer.echo(json.dumps({"ok": True, **result}, indent=2))


@app.command("apply")
def apply_cmd(
    api_url: str | None = typer.Option(None, "--api-url", help="Submit to a running server instead of in-process"),
    reset: bool = typer.Option(False, "--reset", help="Discard the saved draft first"),
) -> None:
    """Fill in the ten-step application form interactively."""
    configure_logging()
    store = FileDraftStore()
    if reset:
        store.clear()

    if api_url:
        submitter: HttpSubmitter | ServiceSubmitter = HttpSubmitter(api_url)
    else:
        ensure_initialized()
        submitter = ServiceSubmitter()

    state = Wizard(
        submitter,
        store,
        email_check=submitter.is_email_available,
        categories=submitter.list_categories,
    ).run()
    if not state.is_complete:
        raise typer.Exit(code=1)


@admin_app.command("list")
def admin_list(
    search: str | None = typer.Option(None, "--search"),
    search_field: str | None = typer.Option(None, "--search-field"),
    status: str | None = typer.Option(None, "--status"),
    category: str | None = typer.Option(None, "--category"),
    min_skills: bool = typer.Option(False, "--min-skills"),
    min_experiences: bool = typer.Option(False, "--min-experiences"),
    min_socials: bool = typer.Option(False, "--min-socials"),
    has_portfolio: bool = typer.Option(False, "--has-portfolio"),
    has_note: bool = typer.Option(False, "--has-note"),
    has_resume: bool = typer.Option(False, "--has-resume"),
    has_video: bool = typer.Option(False, "--has-video"),
    sort_by: str | None = typer.Option(None, "--sort-by"),
    sort_direction: str = typer.Option("desc", "--sort-direction"),
    limit: int = typer.Option(50, "--limit"),
    offset: int = typer.Option(0, "--offset"),
) -> None:
    configure_logging()
    ensure_initialized()
    try:
        query = ApplicationQuery(
            search_value=search,
            search_field=search_field,
            filter_status=status,
            filter_category=category,
            filter_min_skills=min_skills,
            filter_min_experiences=min_experiences,
            filter_min_socials=min_socials,
            filter_has_portfolio=has_portfolio,
            filter_has_note=has_note,
            filter_has_resume=has_resume,
            filter_has_video=has_video,
            sort_by=sort_by,
            sort_direction=sort_direction,
            limit=limit,
            offset=offset,
        )
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc
    with SessionLocal() as db:
        page = list_applications(db, query)
        typer.echo(
            json.dumps(
                {
                    "applications": [
                        ApplicationSummary.model_validate(row).model_dump(mode="json") for row in page.applications
                    ],
                    "total": page.total,
                    "limit": page.limit,
                    "offset": page.offset,
                },
                indent=2,
            )
        )


@admin_app.command("show")
def admin_show(application_id: str = typer.Option(..., "--id")) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        try:
            application = get_application_detail(db, application_id)
        except NotFoundError as exc:
            raise typer.BadParameter(str(exc)) from exc
        typer.echo(json.dumps(ApplicationDetail.model_validate(application).model_dump(mode="json"), indent=2))


@admin_app.command("export")
def admin_export(
    format: str = typer.Option("csv", "--format"),
    status: str | None = typer.Option(None, "--status"),
    category: str | None = typer.Option(None, "--category"),
    output: Path | None = typer.Option(None, "--output"),
) -> None:
    configure_logging()
    ensure_initialized()
    if format not in {"csv", "json"}:
        raise typer.BadParameter("format must be csv or json")
    with SessionLocal() as db:
        result = export_applications(db, format, filter_status=status, filter_category=category)
    if output is None:
        typer.echo(result.data)
        return
    output.write_text(result.data, encoding="utf-8")
    typer.echo(json.dumps({"format": result.format, "output": str(output)}, indent=2))


@admin_app.command("share")
def admin_share(
    application_id: str = typer.Option(..., "--id"),
    public: bool = typer.Option(True, "--on/--off"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        try:
            state = set_public(db, application_id, public)
        except (NotFoundError, TokenMintingError) as exc:
            raise typer.BadParameter(str(exc)) from exc
        typer.echo(
            json.dumps(
                {
                    "application_id": state.application_id,
                    "is_public": state.is_public,
                    "shareable_url": state.shareable_url,
                },
                indent=2,
            )
        )


@admin_app.command("favorite")
def admin_favorite(
    application_id: str = typer.Option(..., "--id"),
    user: str = typer.Option(..., "--user"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        try:
            state = toggle_favorite(db, user, application_id)
        except NotFoundError as exc:
            raise typer.BadParameter(str(exc)) from exc
        typer.echo(json.dumps({"application_id": application_id, "is_favorite": state}, indent=2))


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host"),
    port: int | None = typer.Option(None, "--port"),
) -> None:
    configure_logging()
    ensure_initialized()
    settings = get_settings()
    app_instance = create_app()
    uvicorn.run(app_instance, host=host or settings.app_host, port=port or settings.app_port)
