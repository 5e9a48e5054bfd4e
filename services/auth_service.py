"""
Bearer credential verification against the identity provider (Supabase Auth).
"""
from typing import Optional

import requests

from core.config import get_settings
from core.exceptions import UnauthorizedError
from core.logger import setup_logger

logger = setup_logger(__name__)

BEARER_PREFIX = "Bearer "


class IdentityVerifier:
    """Maps a bearer credential to a user id."""

    def __init__(self):
        """Initialize verifier from settings."""
        self.settings = get_settings()
        self.user_url = f"{self.settings.supabase_url}/auth/v1/user"

    def verify(self, authorization: Optional[str]) -> str:
        """
        Verify an Authorization header value.

        Args:
            authorization: Raw header value, expected as "Bearer <token>"

        Returns:
            The authenticated user's id

        Raises:
            UnauthorizedError: If the header is missing or the token is rejected
        """
        if not authorization or not authorization.startswith(BEARER_PREFIX):
            raise UnauthorizedError("Unauthorized", details={"reason": "missing bearer token"})

        token = authorization[len(BEARER_PREFIX):].strip()
        if not token:
            raise UnauthorizedError("Unauthorized", details={"reason": "empty bearer token"})

        try:
            response = requests.get(
                self.user_url,
                headers={
                    "apikey": self.settings.supabase_anon_key,
                    "Authorization": f"{BEARER_PREFIX}{token}",
                },
                timeout=self.settings.identity_timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Auth error: identity provider unreachable: {e}")
            raise UnauthorizedError("Unauthorized", details={"reason": "identity provider unreachable"})

        if response.status_code != 200:
            logger.error(f"Auth error: identity provider returned {response.status_code}")
            raise UnauthorizedError("Unauthorized", details={"status_code": response.status_code})

        try:
            user = response.json()
        except requests.exceptions.JSONDecodeError:
            user = None

        user_id = user.get("id") if isinstance(user, dict) else None
        if not user_id:
            logger.error("Auth error: identity provider returned no user")
            raise UnauthorizedError("Unauthorized", details={"reason": "no user in response"})

        return str(user_id)
