"""OAuth setup pages: /setup redirects to Spotify, /callback shows the refresh token."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from slowapi import Limiter
from slowapi.util import get_remote_address

from now_playing_overlay.config import Settings
from now_playing_overlay.dependencies import get_app_settings, get_setup_flow
from now_playing_overlay.exceptions import SetupException
from now_playing_overlay.logging_config import get_logger, log_with_context
from now_playing_overlay.services.oauth_service import SetupFlow
from now_playing_overlay.views.template_renderer import TemplateRenderer

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)
logger = get_logger(__name__)


@router.get("/setup", summary="Start Spotify authorization")
@limiter.limit("10/minute")
async def setup(request: Request, flow: SetupFlow = Depends(get_setup_flow)) -> RedirectResponse:
    """Redirect the operator to the Spotify authorization page."""
    return RedirectResponse(url=flow.authorize_url())


@router.get("/callback", summary="Finish Spotify authorization", response_class=HTMLResponse)
@limiter.limit("10/minute")
async def callback(
    request: Request,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    flow: SetupFlow = Depends(get_setup_flow),
    settings: Settings = Depends(get_app_settings),
) -> HTMLResponse:
    """Exchange the authorization code and show the refresh token for manual copy."""
    if error:
        return TemplateRenderer.render_setup_error(request, f"Spotify authorization failed: {error}")
    if not code:
        return TemplateRenderer.render_setup_error(request, "No code received from Spotify.")

    try:
        flow.consume_state(state)
        refresh_token = await flow.exchange_code(code)
    except SetupException as e:
        log_with_context(
            logger,
            "warning",
            "Setup callback failed",
            error=e.message,
            error_code=e.code.value,
            event_type="setup_callback_failed",
        )
        return TemplateRenderer.render_setup_error(request, e.message, status_code=e.status_code)

    log_with_context(logger, "info", "Refresh token issued to operator", event_type="setup_complete")
    return TemplateRenderer.render_setup_complete(
        request,
        refresh_token=refresh_token,
        overlay_url=f"http://{settings.host}:{settings.port}/overlay.html",
    )
