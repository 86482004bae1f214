"""
GitHub OAuth web flow: authorize redirect, code exchange and profile fetch.

Local user lookup and session issuing happen in the auth routes; this module
only talks to the provider.
"""
from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import urlencode

import httpx

from svgshare.core.config import settings

logger = logging.getLogger(__name__)

USER_AGENT = "svgshare"


class OAuthError(Exception):
    """Provider rejected the exchange or returned something unusable."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class GitHubOAuth:
    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: Optional[str] = None,
        *,
        authorize_url: str = "https://github.com/login/oauth/authorize",
        token_url: str = "https://github.com/login/oauth/access_token",
        user_api_url: str = "https://api.github.com/user",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self._authorize_url = authorize_url
        self.token_url = token_url
        self.user_api_url = user_api_url
        self.timeout = timeout
        self.transport = transport

    def authorize_url(self) -> str:
        params = {"client_id": self.client_id, "scope": "read:user"}
        if self.redirect_uri:
            params["redirect_uri"] = self.redirect_uri
        return f"{self._authorize_url}?{urlencode(params)}"

    def _client(self) -> httpx.AsyncClient:
        timeout = httpx.Timeout(self.timeout, connect=min(self.timeout, 5.0))
        return httpx.AsyncClient(timeout=timeout, transport=self.transport)

    async def exchange_code(self, client: httpx.AsyncClient, code: str) -> str:
        payload = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
        }
        if self.redirect_uri:
            payload["redirect_uri"] = self.redirect_uri

        resp = await client.post(
            self.token_url,
            json=payload,
            headers={"Accept": "application/json", "User-Agent": USER_AGENT},
        )
        try:
            data = resp.json()
        except ValueError:
            raise OAuthError(f"Token endpoint returned {resp.status_code}", status_code=500)

        if data.get("error"):
            logger.info("OAuth code exchange rejected: %s", data.get("error"))
            raise OAuthError(data.get("error_description") or "Auth failed", status_code=400)

        access_token = data.get("access_token")
        if not access_token:
            raise OAuthError("Auth failed", status_code=400)
        return access_token

    async def fetch_profile(self, client: httpx.AsyncClient, access_token: str) -> dict[str, Any]:
        resp = await client.get(
            self.user_api_url,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/json",
                "User-Agent": USER_AGENT,
            },
        )
        if resp.status_code >= 400:
            logger.warning("GitHub profile request failed: status=%s", resp.status_code)
            raise OAuthError("Failed to fetch user info", status_code=500)

        profile = resp.json()
        if not isinstance(profile, dict) or profile.get("id") is None:
            raise OAuthError("Failed to fetch user info", status_code=500)
        return profile

    async def complete(self, code: str) -> dict[str, Any]:
        """Exchange the callback code and return the raw provider profile."""
        async with self._client() as client:
            access_token = await self.exchange_code(client, code)
            return await self.fetch_profile(client, access_token)


def get_oauth() -> GitHubOAuth:
    """OAuth client dependency"""
    return GitHubOAuth(
        settings.GITHUB_CLIENT_ID,
        settings.GITHUB_CLIENT_SECRET,
        settings.GITHUB_REDIRECT_URI,
        authorize_url=settings.GITHUB_AUTHORIZE_URL,
        token_url=settings.GITHUB_TOKEN_URL,
        user_api_url=settings.GITHUB_USER_API_URL,
        timeout=settings.OAUTH_TIMEOUT_SECONDS,
    )
