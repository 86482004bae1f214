from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import FileResponse

STATIC_DIR = Path(__file__).resolve().parent.parent / "static"

router = APIRouter(include_in_schema=False)


def _page(name: str) -> FileResponse:
    return FileResponse(STATIC_DIR / name, media_type="text/html")


@router.get("/")
async def index_page():
    return _page("index.html")


@router.get("/dashboard")
async def dashboard_page():
    return _page("dashboard.html")


@router.get("/admin")
async def admin_page():
    return _page("admin.html")


@router.get("/s/{share_id}")
async def share_page(share_id: str):
    # share.js reads the token from the URL
    return _page("share.html")
