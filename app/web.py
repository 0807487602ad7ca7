from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from storage.status_cache import StatusCache, build_default_status_cache


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))

REFRESH_SECONDS = 10


def get_status_cache() -> StatusCache:
    return build_default_status_cache()


router = APIRouter(include_in_schema=False)


@router.get("/", name="status_page", response_class=HTMLResponse)
async def status_page(
    request: Request,
    cache: StatusCache = Depends(get_status_cache),
) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "status.html",
        {
            "snapshot": cache.get(),
            "refresh_seconds": REFRESH_SECONDS,
        },
    )
