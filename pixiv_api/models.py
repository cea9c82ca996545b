from datetime import datetime
from typing import Optional

from pydantic import model_validator

from pixiv_api.base.domain.value_object import ValueObject

__all__ = [
    "BookmarkTag",
    "Comment",
    "Illust",
    "ImageUrls",
    "MarkedNovel",
    "MetaPage",
    "Novel",
    "NovelMarker",
    "Profile",
    "ProfileImageUrls",
    "Series",
    "Tag",
    "UgoiraFrame",
    "User",
    "UserPreview",
]


class ImageUrls(ValueObject):
    square_medium: Optional[str] = None
    medium: Optional[str] = None
    large: Optional[str] = None
    original: Optional[str] = None


class ProfileImageUrls(ValueObject):
    medium: Optional[str] = None


class User(ValueObject):
    id: int
    name: str = ""
    account: str = ""
    profile_image_urls: ProfileImageUrls = ProfileImageUrls()
    comment: Optional[str] = None
    is_followed: Optional[bool] = None


class Tag(ValueObject):
    name: str
    translated_name: Optional[str] = None
    added_by_uploaded_user: Optional[bool] = None


class Series(ValueObject):
    id: Optional[int] = None
    title: str = ""


class MetaPage(ValueObject):
    image_urls: ImageUrls = ImageUrls()


class Illust(ValueObject):
    id: int
    title: str = ""
    type: str = ""
    image_urls: ImageUrls = ImageUrls()
    caption: str = ""
    restrict: int = 0
    user: Optional[User] = None
    tags: tuple[Tag, ...] = ()
    tools: tuple[str, ...] = ()
    create_date: Optional[datetime] = None
    page_count: int = 1
    width: int = 0
    height: int = 0
    sanity_level: int = 0
    x_restrict: int = 0
    series: Optional[Series] = None
    original_image_url: Optional[str] = None
    meta_pages: tuple[MetaPage, ...] = ()
    total_view: int = 0
    total_bookmarks: int = 0
    total_comments: Optional[int] = None
    is_bookmarked: bool = False
    visible: bool = True
    is_muted: bool = False

    @model_validator(mode="before")
    @classmethod
    def flatten_meta_single_page(cls, data):
        # pixiv nests the url of single-page illusts in 'meta_single_page'
        if isinstance(data, dict) and data.get("meta_single_page"):
            data = dict(data)
            meta_single_page = data.pop("meta_single_page")
            if "original_image_url" in meta_single_page:
                data.setdefault(
                    "original_image_url", meta_single_page["original_image_url"]
                )
        return data


class Novel(ValueObject):
    id: int
    title: str = ""
    caption: str = ""
    restrict: int = 0
    x_restrict: int = 0
    is_original: bool = False
    image_urls: ImageUrls = ImageUrls()
    create_date: Optional[datetime] = None
    tags: tuple[Tag, ...] = ()
    page_count: int = 1
    text_length: int = 0
    user: Optional[User] = None
    series: Optional[Series] = None
    is_bookmarked: bool = False
    total_bookmarks: int = 0
    total_view: int = 0
    visible: bool = True
    total_comments: int = 0
    is_muted: bool = False


class NovelMarker(ValueObject):
    """The page where the reader stopped reading a novel."""

    page: Optional[int] = None


class MarkedNovel(ValueObject):
    novel: Novel
    novel_marker: NovelMarker = NovelMarker()


class Comment(ValueObject):
    id: int
    comment: str = ""
    date: Optional[datetime] = None
    user: Optional[User] = None
    has_replies: bool = False


class UserPreview(ValueObject):
    """A user together with their three latest illusts and novels."""

    user: User
    illusts: tuple[Illust, ...] = ()
    novels: tuple[Novel, ...] = ()
    is_muted: bool = False


class BookmarkTag(ValueObject):
    name: str
    count: int = 0


class Profile(ValueObject):
    webpage: Optional[str] = None
    gender: str = ""
    birth: str = ""
    region: str = ""
    job: str = ""
    total_follow_users: int = 0
    total_mypixiv_users: int = 0
    total_illusts: int = 0
    total_manga: int = 0
    total_novels: int = 0
    total_illust_bookmarks_public: int = 0
    total_illust_series: int = 0
    total_novel_series: int = 0
    background_image_url: Optional[str] = None
    twitter_account: str = ""
    is_premium: bool = False
    is_using_custom_profile_image: bool = False


class UgoiraFrame(ValueObject):
    file: str
    delay: int  # in milliseconds
