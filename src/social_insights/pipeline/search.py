from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from social_insights.features.search import (
    get_follows_in_date_range,
    get_photos_with_min_likes,
    search_comments_by_date_range,
    search_comments_by_keyword,
    search_comments_by_photo,
    search_comments_by_user,
    search_photos_by_date_range,
    search_photos_by_tags,
    search_photos_by_user,
    search_tags_by_name,
    search_users_by_date_range,
    search_users_by_username,
)
from social_insights.io.schema import Comment, Dataset, Follow, Photo, Tag, User

DateRange = tuple[datetime | None, datetime | None]


@dataclass(frozen=True)
class SearchCriteria:
    username: str = ""
    user_created: DateRange | None = None
    photo_user_id: str = ""
    photo_created: DateRange | None = None
    photo_tags: tuple[str, ...] = ()
    min_likes: int = 0
    comment_user_id: str = ""
    comment_photo_id: str = ""
    comment_keyword: str = ""
    comment_created: DateRange | None = None
    tag_query: str = ""
    follow_created: DateRange | None = None


@dataclass(frozen=True)
class SearchResults:
    users: list[User]
    photos: list[Photo]
    comments: list[Comment]
    tags: list[Tag]
    follows: list[Follow]
    active_filters: list[str] = field(default_factory=list)


def parse_tag_list(raw: str | None) -> tuple[str, ...]:
    """Split a comma separated tag input into lowercase names."""
    if not raw:
        return ()
    return tuple(name.strip().lower() for name in raw.split(",") if name.strip())


def _range_label(prefix: str, bounds: DateRange) -> str:
    start, end = bounds
    start_text = start.date().isoformat() if start else "start"
    end_text = end.date().isoformat() if end else "now"
    return f"{prefix}: {start_text} - {end_text}"


def _has_bounds(bounds: DateRange | None) -> bool:
    return bounds is not None and (bounds[0] is not None or bounds[1] is not None)


def apply_search_filters(dataset: Dataset, criteria: SearchCriteria) -> SearchResults:
    """Apply each populated criterion in turn; populated criteria combine with AND."""
    users = list(dataset.users)
    photos = list(dataset.photos)
    comments = list(dataset.comments)
    tags = list(dataset.tags)
    follows = list(dataset.follows)
    active: list[str] = []
    usernames = {user.id: user.username for user in dataset.users}

    if criteria.username:
        users = search_users_by_username(users, criteria.username)
        active.append(f"Username: {criteria.username}")
    if _has_bounds(criteria.user_created):
        users = search_users_by_date_range(users, *criteria.user_created)
        active.append(_range_label("User created", criteria.user_created))

    if criteria.photo_user_id:
        photos = search_photos_by_user(photos, criteria.photo_user_id)
        owner = usernames.get(criteria.photo_user_id, criteria.photo_user_id)
        active.append(f"Photos by: {owner}")
    if _has_bounds(criteria.photo_created):
        photos = search_photos_by_date_range(photos, *criteria.photo_created)
        active.append(_range_label("Photos from", criteria.photo_created))
    if criteria.photo_tags:
        photos = search_photos_by_tags(
            photos, dataset.photo_tags, dataset.tags, criteria.photo_tags
        )
        active.append(f"Tags: {', '.join(criteria.photo_tags)}")
    if criteria.min_likes > 0:
        photos = get_photos_with_min_likes(photos, dataset.likes, criteria.min_likes)
        active.append(f"Min likes: {criteria.min_likes}")

    if criteria.comment_user_id:
        comments = search_comments_by_user(comments, criteria.comment_user_id)
        author = usernames.get(criteria.comment_user_id, criteria.comment_user_id)
        active.append(f"Comments by: {author}")
    if criteria.comment_photo_id:
        comments = search_comments_by_photo(comments, criteria.comment_photo_id)
        active.append(f"Comments on photo: {criteria.comment_photo_id}")
    if criteria.comment_keyword:
        comments = search_comments_by_keyword(comments, criteria.comment_keyword)
        active.append(f"Keyword: {criteria.comment_keyword}")
    if _has_bounds(criteria.comment_created):
        comments = search_comments_by_date_range(comments, *criteria.comment_created)
        active.append(_range_label("Comments from", criteria.comment_created))

    if criteria.tag_query:
        tags = search_tags_by_name(tags, criteria.tag_query)
        active.append(f"Tag name: {criteria.tag_query}")

    if _has_bounds(criteria.follow_created):
        follows = get_follows_in_date_range(follows, *criteria.follow_created)
        active.append(_range_label("Follows from", criteria.follow_created))

    return SearchResults(
        users=users,
        photos=photos,
        comments=comments,
        tags=tags,
        follows=follows,
        active_filters=active,
    )
