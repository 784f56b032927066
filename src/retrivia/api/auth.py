"""OAuth sign-in endpoints."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Request
from fastapi.responses import RedirectResponse

if TYPE_CHECKING:
    from retrivia.containers import AppContainer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/login")
async def login(request: Request) -> RedirectResponse:
    """Redirect to the OAuth provider."""
    container: AppContainer = request.app.state.container
    callback_url = f"{container.settings.site_url.rstrip('/')}/auth/callback"
    return RedirectResponse(container.identity.sign_in_url(callback_url))


@router.get("/callback")
async def callback(
    request: Request, code: str | None = None, next: str = "/"  # noqa: A002
) -> RedirectResponse:
    """Finish sign-in and send the user back into the app."""
    container: AppContainer = request.app.state.container
    target = next if next.startswith("/") and not next.startswith("//") else "/"
    if not code:
        return RedirectResponse("/?error=missing_code")
    try:
        container.identity.complete_sign_in(code)
    except Exception:
        logger.exception("OAuth code exchange failed")
        return RedirectResponse("/?error=auth")
    return RedirectResponse(target)


@router.post("/logout")
async def logout(request: Request) -> dict[str, str]:
    """Sign the current user out."""
    container: AppContainer = request.app.state.container
    container.identity.sign_out()
    return {"status": "ok"}


@router.get("/me")
async def me(request: Request) -> dict[str, str | None]:
    """Return the signed-in user id, or null when anonymous."""
    container: AppContainer = request.app.state.container
    return {"user_id": container.identity.current_identity()}
