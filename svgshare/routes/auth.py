from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session
import httpx
import logging

from svgshare.core.database import get_db
from svgshare.core.security import clear_session_cookie, get_session_user, set_session_cookie
from svgshare.models import User
from svgshare.schemas.user import MeResponse
from svgshare.services.oauth import GitHubOAuth, OAuthError, get_oauth
from svgshare.services.users import get_or_create_user_from_profile, get_storage_usage

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/login")
async def login(oauth: GitHubOAuth = Depends(get_oauth)):
    """Start the GitHub OAuth flow"""
    return RedirectResponse(url=oauth.authorize_url(), status_code=status.HTTP_302_FOUND)


@router.get("/callback")
async def callback(
    code: str | None = Query(None),
    db: Session = Depends(get_db),
    oauth: GitHubOAuth = Depends(get_oauth),
):
    """Finish the OAuth flow, sync the local user and issue the session cookie"""
    if not code:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing code")

    try:
        profile = await oauth.complete(code)
    except OAuthError as exc:
        logger.info("OAuth callback failed: %s", exc.message)
        raise HTTPException(status_code=exc.status_code, detail=exc.message)
    except httpx.HTTPError as exc:
        logger.exception("OAuth provider unreachable: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Auth Error: {exc}",
        )

    user = get_or_create_user_from_profile(db, profile)
    logger.info("Login success: userId=%s username=%s status=%s", user.id, user.username, user.status)

    response = RedirectResponse(url="/dashboard", status_code=status.HTTP_302_FOUND)
    set_session_cookie(response, user.id)
    return response


@router.get("/me", response_model=MeResponse)
async def get_me(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_session_user),
):
    """Current user, including locked or pending accounts"""
    data = MeResponse.model_validate(current_user)
    data.storage_usage = get_storage_usage(db, current_user.id)
    return data


@router.get("/logout")
async def logout():
    response = RedirectResponse(url="/", status_code=status.HTTP_302_FOUND)
    clear_session_cookie(response)
    return response
