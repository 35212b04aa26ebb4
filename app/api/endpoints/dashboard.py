from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter()

# Load page once at import
DASHBOARD_PATH = Path(__file__).resolve().parent.parent.parent / "templates" / "dashboard.html"
DASHBOARD_HTML = DASHBOARD_PATH.read_text(encoding="utf-8")

DASHBOARD_HEADERS = {
    "cache-control": "no-store",
    "content-security-policy": (
        "default-src 'self'; style-src 'self' 'unsafe-inline'; script-src 'self' 'unsafe-inline'"
    ),
}


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
def dashboard() -> HTMLResponse:
    return HTMLResponse(DASHBOARD_HTML, headers=DASHBOARD_HEADERS)
