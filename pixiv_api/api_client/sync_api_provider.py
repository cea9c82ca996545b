import json as json_lib
from collections.abc import Callable
from http import HTTPStatus

from pydantic import AnyHttpUrl
from urllib3 import BaseHTTPResponse
from urllib3 import PoolManager
from urllib3 import Retry
from urllib3.exceptions import HTTPError

from pixiv_api.base.domain.types import Json

from .api_provider import build_url
from .api_provider import check_exception
from .api_provider import is_json_content_type
from .api_provider import RETRY_METHODS
from .api_provider import RETRY_STATUSES
from .exceptions import ApiException
from .exceptions import DecodeError
from .exceptions import TransportError

__all__ = ["SyncApiProvider"]


class SyncApiProvider:
    """Blocking counterpart of ApiProvider, on a urllib3 PoolManager.

    Paths are joined to ``url``; absolute urls (pixiv's next_url cursors) are
    requested as-is. GET requests are retried by urllib3 only when ``retries``
    is set. Connection failures surface as TransportError, unparseable
    bodies as DecodeError.
    """

    def __init__(
        self,
        url: AnyHttpUrl,
        headers_factory: Callable[[], dict[str, str]] | None = None,
        retries: int = 0,
        backoff_factor: float = 1.0,
        trailing_slash: bool = False,
    ):
        self._url = str(url)
        if not self._url.endswith("/"):
            self._url += "/"
        self._headers_factory = headers_factory
        self._pool = PoolManager(
            retries=Retry(
                retries,
                backoff_factor=backoff_factor,
                status_forcelist=RETRY_STATUSES,
                allowed_methods=RETRY_METHODS,
                raise_on_status=False,
            )
        )
        self._trailing_slash = trailing_slash

    def _headers(self, headers: dict[str, str] | None) -> dict[str, str]:
        result = self._headers_factory() if self._headers_factory else {}
        return {**result, **(headers or {})}

    def _decode(self, response: BaseHTTPResponse) -> Json | None:
        status = HTTPStatus(response.status)
        if status is HTTPStatus.NO_CONTENT:
            return None
        content_type = response.headers.get("Content-Type")
        if not is_json_content_type(content_type):
            raise ApiException(
                f"Unexpected content type '{content_type}'", status=status
            )
        try:
            body = json_lib.loads(response.data.decode())
        except ValueError as e:
            raise DecodeError(f"invalid JSON body: {e}", status=status) from e
        check_exception(status, body)
        return body

    def request(
        self,
        method: str,
        path: str,
        params: Json | None = None,
        json: Json | None = None,
        fields: Json | None = None,
        headers: dict[str, str] | None = None,
        timeout: float = 5.0,
    ) -> Json | None:
        if json is not None and fields is not None:
            raise ValueError("Cannot both specify 'json' and 'fields'")
        headers = self._headers(headers)
        body_kwargs = {}
        if json is not None:
            body_kwargs["body"] = json_lib.dumps(json).encode()
            headers["Content-Type"] = "application/json"
        elif fields is not None:
            # pixiv expects urlencoded forms
            body_kwargs = {"fields": fields, "encode_multipart": False}
        url = build_url(self._url, path, params, self._trailing_slash)
        try:
            response = self._pool.request(
                method=method, url=url, headers=headers, timeout=timeout, **body_kwargs
            )
        except HTTPError as e:
            raise TransportError(str(e) or type(e).__name__) from e
        return self._decode(response)
