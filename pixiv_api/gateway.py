import logging
from http import HTTPStatus
from typing import Optional

import inject
from pydantic import ValidationError

from .api_client import ApiProvider
from .api_client import DecodeError
from .api_client import SyncApiProvider
from .api_client.client_headers import client_headers
from .base.domain.exceptions import FetcherUnavailable
from .base.domain.pagination import Fetcher
from .base.domain.pagination import M
from .base.domain.pagination import Page
from .base.domain.pagination import SyncFetcher
from .base.domain.types import Id
from .base.domain.types import Json
from .oauth2.refresh_token import RefreshTokenGateway
from .oauth2.refresh_token import SyncRefreshTokenGateway
from .pages import BookmarkTagPage
from .pages import CommentPage
from .pages import IllustPage
from .pages import MarkedNovelPage
from .pages import NovelPage
from .pages import UserPreviewPage
from .responses import CommentResponse
from .responses import IllustResponse
from .responses import NovelResponse
from .responses import NovelTextResponse
from .responses import TagsResponse
from .responses import TrendingTagsResponse
from .responses import UgoiraMetadataResponse
from .responses import UserDetailResponse
from .settings import PixivSettings

__all__ = ["PixivGateway", "SyncPixivGateway"]

logger = logging.getLogger(__name__)

# pixiv returns image urls in the form the iOS app expects
FILTER = "for_ios"


def decode(fetcher: Fetcher | SyncFetcher, target: type[M], body: Json) -> M:
    try:
        result = target.model_validate(body)
    except ValidationError as e:
        raise DecodeError(
            f"cannot decode response as {target.__name__}: {e}", status=HTTPStatus.OK
        )
    if isinstance(result, Page):
        result.bind(fetcher)
    return result


class PixivEndpoints:
    """The endpoints of the pixiv app API.

    Every method calls ``self.get`` (or ``self.post``) and returns its result;
    for the async gateway that is an awaitable. Methods that return a ``Page``
    can be continued with ``advance()`` / ``advance_async()``.
    """

    def get(self, target: type[M], url: str, params: Json | None = None):
        raise NotImplementedError()

    def post(self, target: type[M], url: str, fields: Json):
        raise NotImplementedError()

    # illusts

    def illust_detail(self, illust_id: Id):
        return self.get(IllustResponse, "v1/illust/detail", {"illust_id": illust_id})

    def user_illusts(self, user_id: Id, type: str = "illust"):
        return self.get(
            IllustPage,
            "v1/user/illusts",
            {"user_id": user_id, "type": type, "filter": FILTER},
        )

    def user_bookmarks_illust(
        self, user_id: Id, restrict: str = "public", tag: str | None = None
    ):
        return self.get(
            IllustPage,
            "v1/user/bookmarks/illust",
            {"user_id": user_id, "restrict": restrict, "filter": FILTER, "tag": tag},
        )

    def illust_new(self, content_type: str = "illust"):
        return self.get(
            IllustPage,
            "v1/illust/new",
            {"content_type": content_type, "filter": FILTER},
        )

    def illust_follow(self, restrict: str = "public"):
        return self.get(IllustPage, "v2/illust/follow", {"restrict": restrict})

    def illust_mypixiv(self):
        return self.get(IllustPage, "v2/illust/mypixiv")

    def illust_recommended(
        self, content_type: str = "illust", include_ranking_illusts: bool = True
    ):
        return self.get(
            IllustPage,
            "v1/illust/recommended",
            {
                "content_type": content_type,
                "include_ranking_label": "true",
                "include_ranking_illusts": str(include_ranking_illusts).lower(),
                "filter": FILTER,
            },
        )

    def illust_ranking(self, mode: str = "day", date: str | None = None):
        return self.get(
            IllustPage,
            "v1/illust/ranking",
            {"mode": mode, "date": date, "filter": FILTER},
        )

    def search_illust(
        self,
        word: str,
        search_target: str = "partial_match_for_tags",
        sort: str = "date_desc",
        duration: str | None = None,
    ):
        return self.get(
            IllustPage,
            "v1/search/illust",
            {
                "word": word,
                "search_target": search_target,
                "sort": sort,
                "duration": duration,
                "filter": FILTER,
            },
        )

    def illust_related(self, illust_id: Id):
        return self.get(
            IllustPage, "v2/illust/related", {"illust_id": illust_id, "filter": FILTER}
        )

    def ugoira_metadata(self, illust_id: Id):
        return self.get(
            UgoiraMetadataResponse, "v1/ugoira/metadata", {"illust_id": illust_id}
        )

    # novels

    def novel_detail(self, novel_id: Id):
        return self.get(NovelResponse, "v2/novel/detail", {"novel_id": novel_id})

    def novel_text(self, novel_id: Id):
        return self.get(NovelTextResponse, "v1/novel/text", {"novel_id": novel_id})

    def user_novels(self, user_id: Id):
        return self.get(
            NovelPage, "v1/user/novels", {"user_id": user_id, "filter": FILTER}
        )

    def user_bookmarks_novel(
        self, user_id: Id, restrict: str = "public", tag: str | None = None
    ):
        return self.get(
            NovelPage,
            "v1/user/bookmarks/novel",
            {"user_id": user_id, "restrict": restrict, "tag": tag},
        )

    def novel_new(self):
        return self.get(NovelPage, "v1/novel/new")

    def novel_recommended(self, include_ranking_novels: bool = True):
        return self.get(
            NovelPage,
            "v1/novel/recommended",
            {
                "include_ranking_label": "true",
                "include_ranking_novels": str(include_ranking_novels).lower(),
                "filter": FILTER,
            },
        )

    def search_novel(
        self,
        word: str,
        search_target: str = "partial_match_for_tags",
        sort: str = "date_desc",
    ):
        return self.get(
            NovelPage,
            "v1/search/novel",
            {"word": word, "search_target": search_target, "sort": sort},
        )

    def novel_markers(self):
        return self.get(MarkedNovelPage, "v2/novel/markers")

    # comments

    def illust_comments(self, illust_id: Id):
        return self.get(CommentPage, "v2/illust/comments", {"illust_id": illust_id})

    def novel_comments(self, novel_id: Id):
        return self.get(CommentPage, "v2/novel/comments", {"novel_id": novel_id})

    def comment_replies(self, comment_id: Id):
        return self.get(
            CommentPage, "v1/illust/comment/replies", {"comment_id": comment_id}
        )

    def illust_comment_add(
        self, illust_id: Id, comment: str, parent_comment_id: Id | None = None
    ):
        fields = {"illust_id": str(illust_id), "comment": comment}
        if parent_comment_id is not None:
            fields["parent_comment_id"] = str(parent_comment_id)
        return self.post(CommentResponse, "v1/illust/comment/add", fields)

    # users

    def user_detail(self, user_id: Id):
        return self.get(
            UserDetailResponse, "v1/user/detail", {"user_id": user_id, "filter": FILTER}
        )

    def user_following(self, user_id: Id, restrict: str = "public"):
        return self.get(
            UserPreviewPage,
            "v1/user/following",
            {"user_id": user_id, "restrict": restrict},
        )

    def user_follower(self, user_id: Id):
        return self.get(
            UserPreviewPage, "v1/user/follower", {"user_id": user_id, "filter": FILTER}
        )

    def user_bookmark_tags_illust(self, restrict: str = "public"):
        return self.get(
            BookmarkTagPage, "v1/user/bookmark-tags/illust", {"restrict": restrict}
        )

    # tags

    def trending_tags_illust(self):
        return self.get(
            TrendingTagsResponse, "v1/trending-tags/illust", {"filter": FILTER}
        )

    def search_autocomplete(self, word: str):
        return self.get(TagsResponse, "v2/search/autocomplete", {"word": word})


class PixivGateway(PixivEndpoints, Fetcher):
    """Fetches and decodes pixiv app API responses (asyncio).

    The provider is given explicitly or looked up with ``inject``.
    """

    def __init__(
        self, provider_override: Optional[ApiProvider] = None, timeout: float = 5.0
    ):
        self.provider_override = provider_override
        self.timeout = timeout
        self._closed = False

    @classmethod
    def from_settings(cls, settings: PixivSettings) -> "PixivGateway":
        token_gateway = RefreshTokenGateway(settings.auth)

        async def headers_factory():
            return {
                **client_headers(settings.accept_language, settings.auth.hash_secret),
                **(await token_gateway.fetch_headers()),
            }

        provider = ApiProvider(
            url=settings.url,
            headers_factory=headers_factory,
            retries=settings.retries,
            backoff_factor=settings.backoff_factor,
        )
        return cls(provider, timeout=settings.timeout)

    @property
    def provider(self) -> ApiProvider:
        if self._closed:
            raise FetcherUnavailable("the gateway is closed")
        return self.provider_override or inject.instance(ApiProvider)

    async def get(self, target: type[M], url: str, params: Json | None = None) -> M:
        provider = self.provider
        logger.debug(f"GET {url}")
        result = await provider.request("GET", url, params=params, timeout=self.timeout)
        if result is None:
            raise DecodeError("empty response body", status=HTTPStatus.NO_CONTENT)
        return decode(self, target, result)

    async def post(self, target: type[M], url: str, fields: Json) -> M:
        provider = self.provider
        logger.debug(f"POST {url}")
        result = await provider.request(
            "POST", url, fields=fields, timeout=self.timeout
        )
        if result is None:
            raise DecodeError("empty response body", status=HTTPStatus.NO_CONTENT)
        return decode(self, target, result)

    async def aclose(self) -> None:
        self._closed = True

    async def __aenter__(self) -> "PixivGateway":
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()


# This is a copy-paste of PixivGateway, but with all the async / await removed


class SyncPixivGateway(PixivEndpoints, SyncFetcher):
    def __init__(
        self, provider_override: Optional[SyncApiProvider] = None, timeout: float = 5.0
    ):
        self.provider_override = provider_override
        self.timeout = timeout
        self._closed = False

    @classmethod
    def from_settings(cls, settings: PixivSettings) -> "SyncPixivGateway":
        token_gateway = SyncRefreshTokenGateway(settings.auth)

        def headers_factory():
            return {
                **client_headers(settings.accept_language, settings.auth.hash_secret),
                **token_gateway.fetch_headers(),
            }

        provider = SyncApiProvider(
            url=settings.url,
            headers_factory=headers_factory,
            retries=settings.retries,
            backoff_factor=settings.backoff_factor,
        )
        return cls(provider, timeout=settings.timeout)

    @property
    def provider(self) -> SyncApiProvider:
        if self._closed:
            raise FetcherUnavailable("the gateway is closed")
        return self.provider_override or inject.instance(SyncApiProvider)

    def get(self, target: type[M], url: str, params: Json | None = None) -> M:
        provider = self.provider
        logger.debug(f"GET {url}")
        result = provider.request("GET", url, params=params, timeout=self.timeout)
        if result is None:
            raise DecodeError("empty response body", status=HTTPStatus.NO_CONTENT)
        return decode(self, target, result)

    def post(self, target: type[M], url: str, fields: Json) -> M:
        provider = self.provider
        logger.debug(f"POST {url}")
        result = provider.request("POST", url, fields=fields, timeout=self.timeout)
        if result is None:
            raise DecodeError("empty response body", status=HTTPStatus.NO_CONTENT)
        return decode(self, target, result)

    def close(self) -> None:
        self._closed = True

    def __enter__(self) -> "SyncPixivGateway":
        return self

    def __exit__(self, *args) -> None:
        self.close()
