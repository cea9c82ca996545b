import hashlib
from datetime import datetime
from datetime import timezone

__all__ = ["client_headers"]


USER_AGENT = "PixivAndroidApp/5.0.234 (Android 11; Pixel 5)"
APP_OS = "android"
APP_OS_VERSION = "11"


def now() -> datetime:
    # this function is there so that we can mock it in tests
    return datetime.now(timezone.utc)


def client_headers(
    accept_language: str | None = None, hash_secret: str | None = None
) -> dict[str, str]:
    """The headers with which the official app identifies itself."""
    headers = {
        "App-OS": APP_OS,
        "App-OS-Version": APP_OS_VERSION,
        "User-Agent": USER_AGENT,
    }
    if accept_language:
        headers["Accept-Language"] = accept_language
    if hash_secret:
        client_time = now().strftime("%Y-%m-%dT%H:%M:%S+00:00")
        headers["X-Client-Time"] = client_time
        headers["X-Client-Hash"] = hashlib.md5(
            (client_time + hash_secret).encode()
        ).hexdigest()
    return headers
