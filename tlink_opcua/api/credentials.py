"""
Bearer credential management.

The credential is obtained with an OAuth password grant and reused until
its absolute expiry. Nothing is persisted across restarts.
"""

import time
from typing import Callable

import aiohttp

from ..exceptions import AuthError, PayloadError, TransportError, ValidationError
from ..logging import log_debug, log_error, log_info, log_warn
from ..types import Credential, TokenResponse
from .client import TOKEN_PATH, TlinkApiClient


class CredentialManager:
    """
    Owns the bearer credential and refreshes it on demand.

    No retry or backoff is done here; a failed refresh is simply
    attempted again on the next call.
    """

    def __init__(
        self,
        client: TlinkApiClient,
        username: str,
        password: str,
        client_id: str,
        secret: str,
        clock: Callable[[], float] = time.time
    ):
        self.client = client
        self.username = username
        self.password = password
        self.client_id = client_id
        self.secret = secret
        self._clock = clock
        self.credential = Credential()

    async def ensure_valid(self) -> Credential:
        """
        Return a usable credential, refreshing it if absent or expired.

        Raises:
            AuthError: If the token exchange fails
        """
        if self.credential.is_usable(self._clock()):
            return self.credential

        return await self._refresh()

    async def _refresh(self) -> Credential:
        """Run the password-grant exchange and store the result."""
        form = {
            "grant_type": "password",
            "username": self.username,
            "password": self.password,
        }
        basic_auth = aiohttp.BasicAuth(self.client_id, self.secret)

        try:
            data = await self.client.post_form(TOKEN_PATH, form, basic_auth=basic_auth)
        except (TransportError, PayloadError) as e:
            log_error("Failed to obtain access token")
            log_debug(str(e))
            raise AuthError(AuthError.TRANSPORT, message=str(e)) from e

        try:
            response = TokenResponse.from_dict(data)
        except ValidationError as e:
            log_warn(f"Token response rejected: {e}")
            log_debug(str(data))
            raise AuthError(AuthError.MISSING_FIELD, field=getattr(e, "field", None)) from e

        # Replaced as a whole, never field by field
        self.credential = Credential(
            token=response.access_token,
            expires_at=self._clock() + response.expires_in,
            user_id=response.user_id,
        )
        log_info(f"Access token refreshed for user {response.user_id}, "
                 f"expires in {response.expires_in}s")
        return self.credential
