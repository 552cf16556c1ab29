"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import Callable

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import PlainTextResponse, Response

from app.schemas import (
    CompactUpdate,
    FormResponse,
    HumidityUpdate,
    SelfCheckResponse,
    SystemIdUpdate,
    TemperatureUpdate,
)
from services.encoder import MEDIA_TYPE
from services.session import ExportNotReadyError, FormSession, FormSnapshot, build_default_session

router = APIRouter()


def get_session() -> FormSession:
    return build_default_session()


def _edit(action: Callable[[], FormSnapshot]) -> FormResponse:
    try:
        snapshot = action()
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=exc.args[0] if exc.args else "Not found.",
        ) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    return FormResponse.from_snapshot(snapshot)


def _not_ready(exc: ExportNotReadyError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))


def _attachment(content: str | bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type=MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/form", response_model=FormResponse, summary="Current form state and derived output.")
async def get_form(session: FormSession = Depends(get_session)) -> FormResponse:
    return FormResponse.from_snapshot(session.snapshot())


@router.put("/form/system-id", response_model=FormResponse, summary="Set the global system id.")
async def put_system_id(
    body: SystemIdUpdate,
    session: FormSession = Depends(get_session),
) -> FormResponse:
    return _edit(lambda: session.set_system_id(body.system_id))


@router.put("/form/compact", response_model=FormResponse, summary="Toggle compact JSON output.")
async def put_compact(
    body: CompactUpdate,
    session: FormSession = Depends(get_session),
) -> FormResponse:
    return _edit(lambda: session.set_compact(body.compact))


@router.post(
    "/form/groups",
    status_code=status.HTTP_201_CREATED,
    response_model=FormResponse,
    summary="Append an empty setpoint group.",
)
async def post_group(session: FormSession = Depends(get_session)) -> FormResponse:
    return _edit(session.add_group)


@router.post(
    "/form/groups/presets/{preset}",
    status_code=status.HTTP_201_CREATED,
    response_model=FormResponse,
    summary="Append a quick-add preset group.",
)
async def post_preset_group(preset: str, session: FormSession = Depends(get_session)) -> FormResponse:
    return _edit(lambda: session.quick_add(preset))


@router.put(
    "/form/groups/{group_id}/temperature",
    response_model=FormResponse,
    summary="Edit a group's temperature field.",
)
async def put_temperature(
    group_id: str,
    body: TemperatureUpdate,
    session: FormSession = Depends(get_session),
) -> FormResponse:
    return _edit(lambda: session.set_temperature(group_id, body.temperature))


@router.delete("/form/groups/{group_id}", response_model=FormResponse, summary="Remove a setpoint group.")
async def delete_group(group_id: str, session: FormSession = Depends(get_session)) -> FormResponse:
    return _edit(lambda: session.remove_group(group_id))


@router.post(
    "/form/groups/{group_id}/humidities",
    status_code=status.HTTP_201_CREATED,
    response_model=FormResponse,
    summary="Append an empty humidity entry to a group.",
)
async def post_humidity(group_id: str, session: FormSession = Depends(get_session)) -> FormResponse:
    return _edit(lambda: session.add_humidity(group_id))


@router.put(
    "/form/groups/{group_id}/humidities/{humidity_id}",
    response_model=FormResponse,
    summary="Edit a humidity entry.",
)
async def put_humidity(
    group_id: str,
    humidity_id: str,
    body: HumidityUpdate,
    session: FormSession = Depends(get_session),
) -> FormResponse:
    return _edit(lambda: session.set_humidity(group_id, humidity_id, body.nominal))


@router.delete(
    "/form/groups/{group_id}/humidities/{humidity_id}",
    response_model=FormResponse,
    summary="Remove a humidity entry.",
)
async def delete_humidity(
    group_id: str,
    humidity_id: str,
    session: FormSession = Depends(get_session),
) -> FormResponse:
    return _edit(lambda: session.remove_humidity(group_id, humidity_id))


@router.post("/form/sample", response_model=FormResponse, summary="Load the sample setpoints.")
async def post_sample(session: FormSession = Depends(get_session)) -> FormResponse:
    return _edit(session.load_sample)


@router.post("/form/reset", response_model=FormResponse, summary="Reset the form.")
async def post_reset(session: FormSession = Depends(get_session)) -> FormResponse:
    return _edit(session.reset)


@router.get(
    "/export",
    response_class=PlainTextResponse,
    summary="Encoded output document for copying.",
)
async def get_export(
    compact: bool | None = Query(None, description="Override the form's compact setting."),
    session: FormSession = Depends(get_session),
) -> PlainTextResponse:
    try:
        text = session.copy_text(compact)
    except ExportNotReadyError as exc:
        raise _not_ready(exc) from exc
    return PlainTextResponse(text, media_type=MEDIA_TYPE)


@router.get("/export/download", summary="Download the output document as a file.")
async def get_export_download(session: FormSession = Depends(get_session)) -> Response:
    try:
        text, filename = session.download()
    except ExportNotReadyError as exc:
        raise _not_ready(exc) from exc
    return _attachment(text, filename)


@router.get("/downloads/{artifact_name}", include_in_schema=False)
async def get_download_artifact(
    artifact_name: str,
    session: FormSession = Depends(get_session),
) -> Response:
    link = session.artifacts.resolve(artifact_name)
    try:
        if link is None or link.path is None:
            raise FileNotFoundError(artifact_name)
        content = link.path.read_bytes()
    except FileNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Download {artifact_name!r} is no longer available.",
        ) from exc
    return _attachment(content, link.filename)


@router.post("/self-checks", response_model=SelfCheckResponse, summary="Run the builder self-checks.")
async def post_self_checks(session: FormSession = Depends(get_session)) -> SelfCheckResponse:
    return SelfCheckResponse.from_summary(session.run_self_checks())


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /ui for the setpoint builder."}
