"""The paginated responses of the pixiv app API.

Every list endpoint returns the items under a resource-specific key and the
url of the next page under ``next_url``. Use ``advance()`` (or
``advance_async()``) to get the next page and ``iter_pages()`` /
``iter_items()`` to walk through all of them.
"""

from pydantic import Field

from pixiv_api.base.domain.pagination import Page

from .models import BookmarkTag
from .models import Comment
from .models import Illust
from .models import MarkedNovel
from .models import Novel
from .models import UserPreview

__all__ = [
    "BookmarkTagPage",
    "CommentPage",
    "IllustPage",
    "MarkedNovelPage",
    "NovelPage",
    "UserPreviewPage",
]


class IllustPage(Page[Illust]):
    items: tuple[Illust, ...] = Field(default=(), validation_alias="illusts")
    # recommendation queries also return the current ranking; it is not paginated
    ranking_illusts: tuple[Illust, ...] = ()
    search_span_limit: int | None = None


class NovelPage(Page[Novel]):
    items: tuple[Novel, ...] = Field(default=(), validation_alias="novels")
    ranking_novels: tuple[Novel, ...] = ()
    search_span_limit: int | None = None


class MarkedNovelPage(Page[MarkedNovel]):
    items: tuple[MarkedNovel, ...] = Field(
        default=(), validation_alias="marked_novels"
    )


class CommentPage(Page[Comment]):
    items: tuple[Comment, ...] = Field(default=(), validation_alias="comments")


class UserPreviewPage(Page[UserPreview]):
    items: tuple[UserPreview, ...] = Field(
        default=(), validation_alias="user_previews"
    )


class BookmarkTagPage(Page[BookmarkTag]):
    items: tuple[BookmarkTag, ...] = Field(
        default=(), validation_alias="bookmark_tags"
    )
