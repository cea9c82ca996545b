import asyncio
import re
from collections.abc import Awaitable
from collections.abc import Callable
from http import HTTPStatus
from urllib.parse import quote
from urllib.parse import urlencode
from urllib.parse import urljoin
from urllib.parse import urlsplit

import aiohttp
from aiohttp import ClientResponse
from aiohttp import ClientSession
from pydantic import AnyHttpUrl

from pixiv_api.base.domain.types import Json

from .exceptions import ApiException
from .exceptions import DecodeError
from .exceptions import TransportError

__all__ = ["ApiProvider"]


# Retry on 429 and all 5xx errors (because they are mostly temporary)
RETRY_STATUSES = frozenset(
    {
        HTTPStatus.TOO_MANY_REQUESTS,
        HTTPStatus.INTERNAL_SERVER_ERROR,
        HTTPStatus.BAD_GATEWAY,
        HTTPStatus.SERVICE_UNAVAILABLE,
        HTTPStatus.GATEWAY_TIMEOUT,
    }
)
RETRY_METHODS = frozenset(["HEAD", "GET", "PUT", "DELETE", "OPTIONS", "TRACE"])


def is_success(status: HTTPStatus) -> bool:
    """Returns True on 2xx status"""
    return (int(status) // 100) == 2


def check_exception(status: HTTPStatus, body: Json) -> None:
    if not is_success(status):
        raise ApiException(body, status=status)


JSON_CONTENT_TYPE_REGEX = re.compile(r"^application\/[^+]*[+]?(json);?.*$")


def is_json_content_type(content_type: str | None) -> bool:
    if not content_type:
        return False
    return bool(JSON_CONTENT_TYPE_REGEX.match(content_type))


def is_absolute(path: str) -> bool:
    parts = urlsplit(path)
    return parts.scheme in ("http", "https") and bool(parts.netloc)


def join(url: str, path: str, trailing_slash: bool = False) -> str:
    """Results in a full url without trailing slash"""
    assert url.endswith("/")
    assert not path.startswith("/")
    result = urljoin(url, path)
    if trailing_slash and not result.endswith("/"):
        result = result + "/"
    elif not trailing_slash and result.endswith("/"):
        result = result[:-1]
    return result


def add_query_params(url: str, params: Json | None) -> str:
    if params is None:
        return url
    # pixiv does not understand empty parameters
    query = urlencode({k: v for (k, v) in params.items() if v is not None}, doseq=True)
    if not query:
        return url
    return url + "?" + query


def build_url(
    base_url: str, path: str, params: Json | None, trailing_slash: bool = False
) -> str:
    """Join a path and query parameters to the base url.

    Absolute urls (e.g. a next_url cursor) are complete requests: they are
    used verbatim and cannot be combined with params.
    """
    if is_absolute(path):
        if params:
            raise ValueError("Cannot add params to an absolute url")
        return path
    return add_query_params(join(base_url, quote(path), trailing_slash), params)


class ApiProvider:
    """JSON provider for the pixiv app API on aiohttp.

    Args:
        url: API root, e.g. https://app-api.pixiv.net/
        headers_factory: coroutine returning the client and auth headers
        retries: retries per idempotent request on 429/5xx or connection
            errors; 0 (no retries) unless configured
        backoff_factor: the n-th retry waits backoff_factor * 2 ** (n - 1)
        trailing_slash: add (True) or strip (False) trailing slashes on paths
    """

    def __init__(
        self,
        url: AnyHttpUrl,
        headers_factory: Callable[[], Awaitable[dict[str, str]]] | None = None,
        retries: int = 0,
        backoff_factor: float = 1.0,
        trailing_slash: bool = False,
    ):
        self._url = str(url)
        if not self._url.endswith("/"):
            self._url += "/"
        self._headers_factory = headers_factory
        assert retries >= 0
        self._retries = retries
        self._backoff_factor = backoff_factor
        self._trailing_slash = trailing_slash

    @property
    def _session(self) -> ClientSession:
        # There seems to be an issue if the ClientSession is instantiated before
        # the event loop runs. So we do that delayed in a property. Use this property
        # in a context manager.
        return ClientSession()

    async def _request_with_retry(
        self,
        method: str,
        path: str,
        params: Json | None,
        json: Json | None,
        fields: Json | None,
        headers: dict[str, str] | None,
        timeout: float,
    ) -> ClientResponse:
        request_kwargs = {
            "method": method,
            "url": build_url(self._url, path, params, self._trailing_slash),
            "timeout": timeout,
            "json": json,
            "data": fields,
        }
        actual_headers = {}
        if self._headers_factory is not None:
            actual_headers.update(await self._headers_factory())
        if headers:
            actual_headers.update(headers)
        retries = self._retries if method.upper() in RETRY_METHODS else 0
        for attempt in range(retries + 1):
            if attempt > 0:
                backoff = self._backoff_factor * 2 ** (attempt - 1)
                await asyncio.sleep(backoff)

            try:
                async with self._session as session:
                    response = await session.request(
                        headers=actual_headers, **request_kwargs
                    )
                    if response.status in RETRY_STATUSES and attempt < retries:
                        continue
                    await response.read()
                    return response
            except (aiohttp.ClientError, asyncio.exceptions.TimeoutError) as e:
                if attempt == retries:
                    raise TransportError(str(e) or type(e).__name__) from e

        return response  # retries exceeded; return the (possibly error) response

    async def request(
        self,
        method: str,
        path: str,
        params: Json | None = None,
        json: Json | None = None,
        fields: Json | None = None,
        headers: dict[str, str] | None = None,
        timeout: float = 5.0,
    ) -> Json | None:
        response = await self._request_with_retry(
            method, path, params, json, fields, headers, timeout
        )
        status = HTTPStatus(response.status)
        content_type = response.headers.get("Content-Type")
        if status is HTTPStatus.NO_CONTENT:
            return None
        if not is_json_content_type(content_type):
            raise ApiException(
                f"Unexpected content type '{content_type}'", status=status
            )
        try:
            body = await response.json()
        except ValueError as e:
            raise DecodeError(f"invalid JSON body: {e}", status=status) from e
        check_exception(status, body)
        return body
