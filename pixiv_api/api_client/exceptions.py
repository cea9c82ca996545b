from http import HTTPStatus
from typing import Any

from pixiv_api.base.domain.exceptions import FetchError

__all__ = ["ApiException", "DecodeError", "TransportError"]


class ApiException(FetchError, ValueError):
    def __init__(self, obj: Any, status: HTTPStatus):
        self.status = status
        super().__init__(obj)

    @property
    def message(self) -> str:
        """The human readable part of a pixiv error body.

        pixiv errors look like ``{"error": {"message": ..., "reason": ...,
        "user_message": ...}}``; the token endpoint uses
        ``{"errors": {"system": {"message": ...}}}``.
        """
        obj = self.args[0] if self.args else None
        if not isinstance(obj, dict):
            return str(obj)
        if isinstance(obj.get("error"), dict):
            error = obj["error"]
            parts = [error.get(x) for x in ("message", "reason", "user_message")]
            return " ".join(str(x) for x in parts if x)
        if isinstance(obj.get("errors"), dict):
            system = obj["errors"].get("system") or {}
            return str(system.get("message", obj))
        return str(obj)

    def __str__(self):
        return f"{self.status}: {super().__str__()}"


class DecodeError(ApiException):
    """The response body could not be decoded into the expected type."""


class TransportError(FetchError):
    """The request did not produce a response (connection error, timeout)."""
