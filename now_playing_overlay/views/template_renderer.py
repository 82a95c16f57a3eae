"""Template rendering utilities for the setup pages."""

from pathlib import Path

from fastapi import Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"
templates = Jinja2Templates(directory=TEMPLATES_DIR)


class TemplateRenderer:
    """Handles rendering of Jinja2 templates for the OAuth setup flow."""

    @staticmethod
    def render_setup_complete(request: Request, refresh_token: str, overlay_url: str) -> HTMLResponse:
        """Render the page showing the refresh token for the operator to copy."""
        return templates.TemplateResponse(
            request,
            "setup_complete.html",
            {"refresh_token": refresh_token, "overlay_url": overlay_url},
        )

    @staticmethod
    def render_setup_error(request: Request, message: str, status_code: int = 400) -> HTMLResponse:
        """Render a setup failure with a link back to /setup."""
        return templates.TemplateResponse(
            request,
            "setup_error.html",
            {"message": message},
            status_code=status_code,
        )
