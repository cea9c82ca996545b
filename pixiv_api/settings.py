from pydantic import AnyHttpUrl
from pydantic import BaseModel

from .oauth2.refresh_token import PixivAuthSettings

__all__ = ["PixivSettings"]


class PixivSettings(BaseModel):
    url: AnyHttpUrl = "https://app-api.pixiv.net/"
    auth: PixivAuthSettings
    timeout: float = 5.0  # in seconds
    # pages are never refetched; transport retries are opt-in
    retries: int = 0
    backoff_factor: float = 1.0
    accept_language: str | None = None
