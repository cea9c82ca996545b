"""Responses of pixiv app API endpoints that return a single object."""

from typing import Optional

from pydantic import Field
from pydantic import field_validator

from pixiv_api.base.domain.value_object import ValueObject

from .models import Comment
from .models import Illust
from .models import Novel
from .models import NovelMarker
from .models import Profile
from .models import Tag
from .models import UgoiraFrame
from .models import User

__all__ = [
    "CommentResponse",
    "IllustResponse",
    "NovelResponse",
    "NovelTextResponse",
    "ProfilePublicity",
    "TagsResponse",
    "TrendingTag",
    "TrendingTagsResponse",
    "UgoiraMetadata",
    "UgoiraMetadataResponse",
    "UserDetailResponse",
]


class IllustResponse(ValueObject):
    illust: Illust


class NovelResponse(ValueObject):
    novel: Novel


class NovelTextResponse(ValueObject):
    novel_marker: NovelMarker = NovelMarker()
    novel_text: str = ""
    series_prev: Optional[Novel] = None
    series_next: Optional[Novel] = None

    @field_validator("series_prev", "series_next", mode="before")
    @classmethod
    def empty_to_none(cls, v):
        # pixiv sends {} instead of null at the start / end of a series
        return v or None


class ProfilePublicity(ValueObject):
    # all except pawoo are either "public" or "private"
    gender: str = ""
    region: str = ""
    birth_day: str = ""
    birth_year: str = ""
    job: str = ""
    pawoo: bool = False


class UserDetailResponse(ValueObject):
    user: User
    profile: Profile = Profile()
    profile_publicity: ProfilePublicity = ProfilePublicity()
    workspace: dict[str, Optional[str]] = Field(default_factory=dict)


class UgoiraMetadata(ValueObject):
    zip_urls: dict[str, str] = Field(default_factory=dict)
    frames: tuple[UgoiraFrame, ...] = ()


class UgoiraMetadataResponse(ValueObject):
    ugoira_metadata: UgoiraMetadata


class TrendingTag(ValueObject):
    tag: str
    translated_name: Optional[str] = None
    illust: Optional[Illust] = None


class TrendingTagsResponse(ValueObject):
    trend_tags: tuple[TrendingTag, ...] = ()


class TagsResponse(ValueObject):
    tags: tuple[Tag, ...] = ()


class CommentResponse(ValueObject):
    comment: Comment
