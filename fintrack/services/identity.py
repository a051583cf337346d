"""
GitHub OAuth identity provider.
"""
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import httpx
import structlog

from ..config import Settings
from ..middleware.monitoring import EXTERNAL_API_CALLS
from ..models.auth import ExternalIdentity
from ..utils.constants import (
    GITHUB_API_URL,
    GITHUB_AUTHORIZE_URL,
    GITHUB_OAUTH_SCOPE,
    GITHUB_TOKEN_URL,
)
from ..utils.exceptions import ExternalServiceError, ValidationError

logger = structlog.get_logger()

GITHUB_ACCEPT = "application/vnd.github.v3+json"


class GitHubIdentityProvider:
    """Exchanges an authorization code for a GitHub profile.

    The HTTP client is created lazily and must be released with ``aclose``
    at shutdown.
    """
    
    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self._http = http_client
    
    @property
    def http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self.settings.github_timeout_seconds)
        return self._http
    
    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None
    
    def _require_configured(self) -> None:
        if not self.settings.github_client_id or not self.settings.github_client_secret:
            raise ExternalServiceError(
                message="GitHub OAuth is not configured",
                service_name="github"
            )
    
    def authorize_url(self, state: str) -> str:
        """Provider URL the browser is sent to for consent."""
        self._require_configured()
        query = urlencode({
            "client_id": self.settings.github_client_id,
            "redirect_uri": self.settings.github_redirect_uri,
            "scope": GITHUB_OAUTH_SCOPE,
            "state": state,
        })
        return f"{GITHUB_AUTHORIZE_URL}?{query}"
    
    async def exchange_code(self, code: str) -> ExternalIdentity:
        """Trade ``code`` for an access token and read the user's profile."""
        self._require_configured()
        access_token = await self._fetch_access_token(code)
        profile = await self._get_json("/user", access_token)
        
        if not profile.get("id") or not profile.get("login"):
            logger.error("GitHub returned an incomplete profile", fields=sorted(profile))
            raise ValidationError(
                message="Invalid user data from GitHub",
                details={"id": "Missing" if not profile.get("id") else "OK",
                         "login": "Missing" if not profile.get("login") else "OK"}
            )
        
        email = profile.get("email") or await self._primary_email(access_token)
        
        return ExternalIdentity(
            external_id=profile["id"],
            login=profile["login"],
            name=profile.get("name"),
            email=email,
            avatar_url=profile.get("avatar_url")
        )
    
    async def _fetch_access_token(self, code: str) -> str:
        try:
            response = await self.http.post(
                GITHUB_TOKEN_URL,
                headers={"Accept": "application/json"},
                json={
                    "client_id": self.settings.github_client_id,
                    "client_secret": self.settings.github_client_secret,
                    "code": code,
                    "redirect_uri": self.settings.github_redirect_uri,
                }
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            EXTERNAL_API_CALLS.labels(service="github", status="error").inc()
            logger.error("GitHub token exchange failed", error=str(e))
            raise ExternalServiceError(
                message="Failed to exchange code for token",
                service_name="github"
            )
        
        EXTERNAL_API_CALLS.labels(service="github", status="success").inc()
        
        if data.get("error"):
            logger.warning("GitHub OAuth error", error=data.get("error"))
            raise ValidationError(
                message=f"OAuth error: {data.get('error_description') or data['error']}",
                code="OAUTH_ERROR"
            )
        
        if not data.get("access_token"):
            raise ValidationError(
                message="No access token received from GitHub",
                code="OAUTH_ERROR"
            )
        
        return data["access_token"]
    
    async def _get_json(self, path: str, access_token: str) -> Any:
        try:
            response = await self.http.get(
                f"{GITHUB_API_URL}{path}",
                headers={
                    "Authorization": f"Bearer {access_token}",
                    "Accept": GITHUB_ACCEPT,
                }
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            EXTERNAL_API_CALLS.labels(service="github", status="error").inc()
            logger.error("GitHub API call failed", path=path, error=str(e))
            raise ExternalServiceError(
                message="Failed to fetch user data from GitHub",
                service_name="github"
            )
        
        EXTERNAL_API_CALLS.labels(service="github", status="success").inc()
        return data
    
    async def _primary_email(self, access_token: str) -> Optional[str]:
        """Primary address from the email list, else the first one listed."""
        try:
            emails: List[Dict[str, Any]] = await self._get_json("/user/emails", access_token)
        except ExternalServiceError:
            # Email list is optional; a placeholder is built downstream
            return None
        
        if not isinstance(emails, list) or not emails:
            return None
        
        primary = next((entry for entry in emails if entry.get("primary")), None)
        chosen = primary or emails[0]
        return chosen.get("email")
