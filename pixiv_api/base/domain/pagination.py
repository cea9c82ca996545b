# (c) Nelen & Schuurmans

import logging
import weakref
from abc import ABC
from abc import abstractmethod
from collections.abc import AsyncIterator
from collections.abc import Iterator
from typing import Any
from typing import Generic
from typing import TypeVar
from urllib.parse import urlsplit

from pydantic import BaseModel
from pydantic import field_validator
from pydantic import PrivateAttr

from .exceptions import EmptyCursor
from .exceptions import FetcherUnavailable
from .types import Json
from .value_object import ValueObject

__all__ = ["Page", "Fetcher", "SyncFetcher"]

logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)
P = TypeVar("P", bound="Page")


class Fetcher(ABC):
    """Performs an authenticated GET and decodes the JSON body into ``target``.

    ``url`` is either a path relative to the API root or a complete url (a
    cursor). Pages returned by ``get`` are bound to the fetcher.
    """

    @abstractmethod
    async def get(self, target: type[M], url: str, params: Json | None = None) -> M:
        raise NotImplementedError()


# This is a copy-paste of Fetcher, but with all the async / await removed


class SyncFetcher(ABC):
    @abstractmethod
    def get(self, target: type[M], url: str, params: Json | None = None) -> M:
        raise NotImplementedError()


def is_absolute_url(value: str) -> bool:
    parts = urlsplit(value)
    return parts.scheme in ("http", "https") and bool(parts.netloc)


class Page(ValueObject, Generic[T]):
    """One batch of items plus the cursor to the next batch.

    Subclasses redeclare ``items`` with the resource-specific JSON field as
    validation alias. The page keeps a weak reference to the fetcher that
    produced it, so that ``advance`` does not need the caller to pass it
    again. A page does not keep its fetcher alive.
    """

    items: tuple[T, ...] = ()
    next_url: str | None = None

    _fetcher_ref: Any = PrivateAttr(default=None)

    @field_validator("items", mode="before")
    @classmethod
    def validate_items(cls, v):
        return () if v is None else v

    @field_validator("next_url", mode="before")
    @classmethod
    def validate_next_url(cls, v):
        if v is None or v == "":
            return None
        if isinstance(v, str) and not is_absolute_url(v):
            logger.warning(f"ignoring next_url that is not an absolute url: {v!r}")
            return None
        return v

    @property
    def fetcher(self) -> Fetcher | SyncFetcher | None:
        if self._fetcher_ref is None:
            return None
        return self._fetcher_ref()

    @property
    def has_next(self) -> bool:
        return self.next_url is not None

    def bind(self: P, fetcher: Fetcher | SyncFetcher) -> P:
        """Attach the fetcher that will resolve ``next_url``.

        Only fetchers call this, right after decoding the page.
        """
        self._fetcher_ref = weakref.ref(fetcher)
        return self

    def _get_fetcher(self, kind: type) -> Any:
        fetcher = self.fetcher
        if fetcher is None:
            raise FetcherUnavailable(
                f"{type(self).__name__} is not bound to a live fetcher"
            )
        if not isinstance(fetcher, kind):
            raise TypeError(
                f"{type(self).__name__} is bound to {type(fetcher).__name__}, "
                f"which is not a {kind.__name__}"
            )
        return fetcher

    def advance(self: P) -> P:
        """Fetch the page that ``next_url`` points to.

        Raises:
            EmptyCursor: there is no next page; no request is made.
            FetchError: errors of the fetcher propagate unchanged.
        """
        if self.next_url is None:
            raise EmptyCursor()
        fetcher: SyncFetcher = self._get_fetcher(SyncFetcher)
        logger.debug(f"advancing {type(self).__name__} to {self.next_url}")
        return fetcher.get(type(self), self.next_url)

    def iter_pages(self: P) -> Iterator[P]:
        """Yield this page and all pages after it."""
        page = self
        while True:
            yield page
            try:
                page = page.advance()
            except EmptyCursor:
                return

    def iter_items(self) -> Iterator[T]:
        for page in self.iter_pages():
            yield from page.items

    async def advance_async(self: P) -> P:
        if self.next_url is None:
            raise EmptyCursor()
        fetcher: Fetcher = self._get_fetcher(Fetcher)
        logger.debug(f"advancing {type(self).__name__} to {self.next_url}")
        return await fetcher.get(type(self), self.next_url)

    async def aiter_pages(self: P) -> AsyncIterator[P]:
        page = self
        while True:
            yield page
            try:
                page = await page.advance_async()
            except EmptyCursor:
                return

    async def aiter_items(self) -> AsyncIterator[T]:
        async for page in self.aiter_pages():
            for item in page.items:
                yield item
