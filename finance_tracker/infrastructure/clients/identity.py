"""Identity provider HTTP client for resolving bearer tokens to users"""

import httpx
from finance_tracker.domain.models import PLACEHOLDER_PICTURE, User
from finance_tracker.domain.exceptions import AuthenticationInvalidError, IdentityProviderError
from finance_tracker.config import settings


class IdentityClient:
    """Client for a Supabase-compatible auth API"""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.identity_provider_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.identity_api_key
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def get_user(self, token: str) -> User:
        """
        Exchange a bearer token for the user it was issued to.

        Raises:
            AuthenticationInvalidError: Token is malformed, expired or revoked
            IdentityProviderError: On timeout, 5xx or invalid response
        """
        headers = {"Authorization": f"Bearer {token}"}
        if self.api_key:
            headers["apikey"] = self.api_key

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(f"{self.base_url}/auth/v1/user", headers=headers)
                if response.status_code in (400, 401, 403, 404):
                    raise AuthenticationInvalidError("Invalid or expired token")
                response.raise_for_status()
                data = response.json()

                metadata = data.get("user_metadata") or {}
                email = data.get("email") or ""
                return User(
                    id=str(data["id"]),
                    email=email,
                    name=metadata.get("full_name") or metadata.get("name") or email,
                    picture=metadata.get("avatar_url") or PLACEHOLDER_PICTURE,
                )

            except httpx.TimeoutException as e:
                raise IdentityProviderError(f"Identity provider timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise IdentityProviderError(f"Identity provider error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise IdentityProviderError(f"Identity provider unreachable: {e}") from e
            except (KeyError, ValueError, TypeError, AttributeError) as e:
                raise IdentityProviderError(f"Invalid user data from identity provider: {e}") from e
