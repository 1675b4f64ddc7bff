from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal, cast

from fastapi import Body, Depends, FastAPI, File, HTTPException, Query, Request, UploadFile
from fastapi.responses import ORJSONResponse, Response
from pydantic import ValidationError

from adapters.filesystem.template_repository import validate_template_id
from app.config import AppSettings, load_settings
from app.wiring import build_preview_renderer, build_session, build_template_repository
from domain.errors import DanglingReferenceError, PreviewRenderError
from domain.models import DocumentSnapshot
from domain.placeholders import variables_by_category
from domain.ports.rendering import PreviewRenderer
from domain.ports.repositories import TemplateRepository
from domain.services.editor_session import EditorSession

logger = logging.getLogger(__name__)

ExportFormat = Literal["legacy", "v2"]


@dataclass(frozen=True)
class EditorContext:
    settings: AppSettings
    repository: TemplateRepository
    renderer: PreviewRenderer


def create_app(settings: AppSettings) -> FastAPI:
    app = FastAPI(title=settings.editor.title)
    context = EditorContext(
        settings=settings,
        repository=build_template_repository(settings),
        renderer=build_preview_renderer(settings),
    )
    app.state.context = context

    @app.get("/api/variables")
    def api_list_variables() -> ORJSONResponse:
        categories = {
            category: [
                {"name": item.name, "var": item.var, "suffix": item.suffix} for item in items
            ]
            for category, items in variables_by_category().items()
        }
        return ORJSONResponse({"categories": categories})

    @app.get("/api/templates")
    def api_list_templates(context: EditorContext = Depends(get_context)) -> ORJSONResponse:
        return ORJSONResponse({"templates": list(context.repository.list_ids())})

    @app.get("/api/templates/{template_id}")
    def api_get_template(
        template_id: str,
        context: EditorContext = Depends(get_context),
    ) -> ORJSONResponse:
        session = load_session(context, template_id)
        return ORJSONResponse(snapshot_payload(session.get_snapshot()))

    @app.put("/api/templates/{template_id}")
    def api_save_template(
        template_id: str,
        payload: dict[str, Any] = Body(...),
        context: EditorContext = Depends(get_context),
    ) -> ORJSONResponse:
        session = build_session(context.settings)
        try:
            session.hydrate(DocumentSnapshot.model_validate(payload))
        except (ValidationError, DanglingReferenceError) as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        save_session(context, template_id, session)
        return ORJSONResponse({"status": "ok", "templateId": template_id})

    @app.delete("/api/templates/{template_id}")
    def api_delete_template(
        template_id: str,
        context: EditorContext = Depends(get_context),
    ) -> ORJSONResponse:
        guard_template_id(template_id)
        context.repository.delete(template_id)
        return ORJSONResponse({"status": "ok", "templateId": template_id})

    @app.post("/api/templates/{template_id}/pdf")
    async def api_upload_pdf(
        template_id: str,
        file: UploadFile = File(...),
        context: EditorContext = Depends(get_context),
    ) -> ORJSONResponse:
        guard_template_id(template_id)
        raw_bytes = await file.read()
        if not raw_bytes:
            raise HTTPException(status_code=400, detail="Empty upload")
        try:
            page_count = context.renderer.page_count(raw_bytes)
        except PreviewRenderError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        session = build_session(context.settings)
        try:
            session.hydrate(context.repository.load_snapshot(template_id))
        except FileNotFoundError:
            logger.info("Creating template %s from uploaded PDF", template_id)
        session.init_from_page_count(page_count)
        context.repository.save_source_pdf(template_id, raw_bytes)
        save_session(context, template_id, session)
        return ORJSONResponse(
            {
                "status": "ok",
                "templateId": template_id,
                "numPages": page_count,
                "virtualPages": len(session.virtual_pages),
            }
        )

    @app.get("/api/templates/{template_id}/export")
    def api_export_layout(
        template_id: str,
        export_format: ExportFormat = Query("legacy", alias="format"),
        context: EditorContext = Depends(get_context),
    ) -> ORJSONResponse:
        session = load_session(context, template_id)
        if export_format == "v2":
            return ORJSONResponse(session.export_v2())
        return ORJSONResponse(session.export_legacy())

    @app.post("/api/templates/{template_id}/import")
    async def api_import_layout(
        template_id: str,
        request: Request,
        context: EditorContext = Depends(get_context),
    ) -> ORJSONResponse:
        session = load_session(context, template_id)
        raw_bytes = await request.body()
        imported = session.import_layout(raw_bytes)
        if imported is None:
            raise HTTPException(status_code=400, detail="Unrecognized or invalid layout JSON")
        save_session(context, template_id, session)
        return ORJSONResponse(
            {
                "status": "ok",
                "format": imported.source_format,
                "textFields": len(imported.text_fields),
                "imageFields": len(imported.image_fields),
                "paymentPlans": len(imported.payment_plans),
            }
        )

    @app.get("/api/templates/{template_id}/preview.pdf")
    def api_preview_pdf(
        template_id: str,
        context: EditorContext = Depends(get_context),
    ) -> Response:
        session = load_session(context, template_id)
        source_pdf = context.repository.load_source_pdf(template_id)
        if source_pdf is None:
            raise HTTPException(status_code=404, detail="Template PDF not uploaded")
        result = session.export_pdf(context.renderer, source_pdf)
        if not result.ok:
            raise HTTPException(status_code=400, detail=result.message)
        headers = {"Content-Disposition": f'inline; filename="{template_id}-preview.pdf"'}
        return Response(content=result.payload, media_type="application/pdf", headers=headers)

    return app


def get_context(request: Request) -> EditorContext:
    return cast(EditorContext, request.app.state.context)


def guard_template_id(template_id: str) -> None:
    try:
        validate_template_id(template_id)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def load_session(context: EditorContext, template_id: str) -> EditorSession:
    guard_template_id(template_id)
    try:
        snapshot = context.repository.load_snapshot(template_id)
    except FileNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Template not found") from exc
    except ValidationError as exc:
        logger.exception("Stored template %s is invalid", template_id)
        raise HTTPException(status_code=400, detail="Stored template is invalid") from exc
    session = build_session(context.settings)
    try:
        session.hydrate(snapshot)
    except DanglingReferenceError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return session


def save_session(context: EditorContext, template_id: str, session: EditorSession) -> None:
    guard_template_id(template_id)
    context.repository.save_snapshot(template_id, session.get_snapshot())


def snapshot_payload(snapshot: DocumentSnapshot) -> dict[str, Any]:
    return snapshot.model_dump(mode="json", by_alias=True)


app = create_app(load_settings())
