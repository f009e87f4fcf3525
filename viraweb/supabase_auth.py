"""Thin client for the Supabase Auth (GoTrue) REST API"""

import logging
from typing import Optional

import httpx

from .config import (
    SUPABASE_ANON_KEY,
    SUPABASE_PASSWORD_REDIRECT_URL,
    SUPABASE_SERVICE_ROLE_KEY,
    SUPABASE_URL,
)

logger = logging.getLogger(__name__)

TIMEOUT_SECONDS = 10.0
USER_PAGE_SIZE = 100


class SupabaseAuthError(Exception):
    """Raised when Supabase Auth rejects a request"""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class SupabaseAuthClient:
    """Calls the GoTrue endpoints the backend needs on behalf of users"""

    def __init__(
        self,
        url: Optional[str] = SUPABASE_URL,
        anon_key: Optional[str] = SUPABASE_ANON_KEY,
        service_role_key: Optional[str] = SUPABASE_SERVICE_ROLE_KEY,
    ):
        self.url = (url or "").rstrip("/")
        self.anon_key = anon_key
        self.service_role_key = service_role_key

    def is_configured(self) -> bool:
        return bool(self.url and self.anon_key)

    def has_admin_access(self) -> bool:
        return bool(self.url and self.service_role_key)

    def _headers(self, bearer: Optional[str] = None, admin: bool = False) -> dict:
        key = self.service_role_key if admin else self.anon_key
        return {
            "apikey": key or "",
            "Authorization": f"Bearer {bearer or key}",
            "Content-Type": "application/json",
        }

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        return (
            body.get("msg")
            or body.get("error_description")
            or body.get("message")
            or body.get("error")
            or f"HTTP {response.status_code}"
        )

    async def _request(self, method: str, path: str, headers: dict, **kwargs) -> httpx.Response:
        async with httpx.AsyncClient(timeout=TIMEOUT_SECONDS) as client:
            response = await client.request(method, f"{self.url}/auth/v1{path}", headers=headers, **kwargs)
        if response.status_code >= 400:
            message = self._error_message(response)
            logger.warning(f"⚠️ Supabase Auth {method} {path} failed: {response.status_code} {message}")
            raise SupabaseAuthError(message, response.status_code)
        return response

    async def user_exists(self, email: str) -> bool:
        """
        Look up an email through the admin API (requires the service role key).

        The admin filter matches substrings, so every page of candidates is
        checked for an exact, case-insensitive match.
        """
        wanted = email.lower()
        page = 1
        while True:
            response = await self._request(
                "GET",
                "/admin/users",
                headers=self._headers(admin=True),
                params={"page": page, "per_page": USER_PAGE_SIZE, "filter": email},
            )
            users = response.json().get("users", [])
            if any((u.get("email") or "").lower() == wanted for u in users):
                return True
            if len(users) < USER_PAGE_SIZE:
                return False
            page += 1

    async def send_password_recovery(self, email: str) -> None:
        payload = {"email": email}
        params = {}
        if SUPABASE_PASSWORD_REDIRECT_URL:
            params["redirect_to"] = SUPABASE_PASSWORD_REDIRECT_URL
        await self._request("POST", "/recover", headers=self._headers(), json=payload, params=params)
        logger.info(f"📧 Password recovery requested for {email}")

    async def update_user(
        self, access_token: str, email: Optional[str] = None, password: Optional[str] = None
    ) -> dict:
        """Update the identity that owns access_token (email and/or password)"""
        payload = {}
        if email:
            payload["email"] = email
        if password:
            payload["password"] = password
        response = await self._request(
            "PUT", "/user", headers=self._headers(bearer=access_token), json=payload
        )
        return response.json()


supabase_auth = SupabaseAuthClient()
