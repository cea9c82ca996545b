import logging
import time
from functools import lru_cache

from async_lru import alru_cache
from pydantic import AnyHttpUrl
from pydantic import BaseModel

from pixiv_api.api_client import ApiProvider
from pixiv_api.api_client import SyncApiProvider
from pixiv_api.api_client.client_headers import client_headers
from pixiv_api.base.domain.types import Json
from pixiv_api.base.domain.value_object import ValueObject

__all__ = [
    "AccessToken",
    "PixivAuthSettings",
    "RefreshTokenGateway",
    "SyncRefreshTokenGateway",
]

logger = logging.getLogger(__name__)


class PixivAuthSettings(BaseModel):
    token_url: AnyHttpUrl = "https://oauth.secure.pixiv.net/auth/token"
    client_id: str
    client_secret: str
    refresh_token: str
    hash_secret: str | None = None
    timeout: float = 5.0  # in seconds
    leeway: int = 5 * 60  # in seconds


class AccessToken(ValueObject):
    value: str
    expires_at: int  # unix timestamp
    refresh_token: str | None = None


def is_token_usable(token: AccessToken, leeway: int) -> bool:
    """Determine whether the token has expired"""
    refresh_on = token.expires_at - leeway
    return refresh_on >= int(time.time())


def parse_token_response(body: Json) -> AccessToken:
    # older versions of the token endpoint wrap everything in 'response'
    body = body.get("response", body)
    return AccessToken(
        value=body["access_token"],
        expires_at=int(time.time()) + int(body["expires_in"]),
        refresh_token=body.get("refresh_token"),
    )


class RefreshTokenGateway:
    """Obtains access tokens with the OAuth2 refresh token grant.

    The access token is cached until it is ``leeway`` seconds before expiry.
    If pixiv rotates the refresh token, the new one is used from then on.
    """

    def __init__(self, settings: PixivAuthSettings):
        self.client_id = settings.client_id
        self.client_secret = settings.client_secret
        self.refresh_token = settings.refresh_token
        self.timeout = settings.timeout
        self.leeway = settings.leeway

        async def headers_factory():
            return client_headers(hash_secret=settings.hash_secret)

        self.provider = ApiProvider(
            url=settings.token_url, headers_factory=headers_factory
        )
        # This binds the cache to the RefreshTokenGateway instance (and not the class)
        self.cached_fetch_token = alru_cache(self._fetch_token)

    def _fields(self) -> Json:
        return {
            "grant_type": "refresh_token",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "refresh_token": self.refresh_token,
            "get_secure_url": "1",
        }

    async def _fetch_token(self) -> AccessToken:
        logger.debug("refreshing the pixiv access token")
        response = await self.provider.request(
            method="POST", path="", fields=self._fields(), timeout=self.timeout
        )
        assert response is not None
        token = parse_token_response(response)
        if token.refresh_token:
            self.refresh_token = token.refresh_token
        return token

    async def fetch_token(self) -> str:
        token = await self.cached_fetch_token()
        if not is_token_usable(token, self.leeway):
            self.cached_fetch_token.cache_clear()
            token = await self.cached_fetch_token()
        return token.value

    async def fetch_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {await self.fetch_token()}"}


# Copy-paste of async version:


class SyncRefreshTokenGateway:
    def __init__(self, settings: PixivAuthSettings):
        self.client_id = settings.client_id
        self.client_secret = settings.client_secret
        self.refresh_token = settings.refresh_token
        self.timeout = settings.timeout
        self.leeway = settings.leeway

        self.provider = SyncApiProvider(
            url=settings.token_url,
            headers_factory=lambda: client_headers(hash_secret=settings.hash_secret),
        )
        # This binds the cache to the instance (and not the class)
        self.cached_fetch_token = lru_cache(self._fetch_token)

    def _fields(self) -> Json:
        return {
            "grant_type": "refresh_token",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "refresh_token": self.refresh_token,
            "get_secure_url": "1",
        }

    def _fetch_token(self) -> AccessToken:
        logger.debug("refreshing the pixiv access token")
        response = self.provider.request(
            method="POST", path="", fields=self._fields(), timeout=self.timeout
        )
        assert response is not None
        token = parse_token_response(response)
        if token.refresh_token:
            self.refresh_token = token.refresh_token
        return token

    def fetch_token(self) -> str:
        token = self.cached_fetch_token()
        if not is_token_usable(token, self.leeway):
            self.cached_fetch_token.cache_clear()
            token = self.cached_fetch_token()
        return token.value

    def fetch_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.fetch_token()}"}
