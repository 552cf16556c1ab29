from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from app.schemas import FormResponse, SelfCheckResponse
from models.form import QUICK_ADD_PRESETS
from services.session import FormSession, build_default_session


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


def get_session() -> FormSession:
    return build_default_session()


router = APIRouter(include_in_schema=False)


@router.get("/ui", name="ui_index", response_class=HTMLResponse)
async def ui_index(
    request: Request,
    session: FormSession = Depends(get_session),
) -> HTMLResponse:
    summary = session.last_self_check or session.run_self_checks()
    return templates.TemplateResponse(
        request,
        "ui/index.html",
        {
            "form": FormResponse.from_snapshot(session.snapshot()),
            "self_check": SelfCheckResponse.from_summary(summary),
            "presets": list(QUICK_ADD_PRESETS),
        },
    )
