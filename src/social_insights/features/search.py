from __future__ import annotations

from collections import Counter
from datetime import datetime
from typing import Any, Iterable, Sequence

from social_insights.io.schema import (
    Comment,
    Follow,
    Like,
    Photo,
    PhotoTag,
    Tag,
    User,
    iter_records,
)
from social_insights.preprocess.time import is_date_in_range, parse_date


def _no_bounds(start: datetime | None, end: datetime | None) -> bool:
    return start is None and end is None


def _contains(text: str, query: str) -> bool:
    return query.casefold() in (text or "").casefold()


def search_users_by_username(users: Sequence[Any], query: str | None) -> list[User]:
    """Case-insensitive substring match, ordered by username.

    An empty query returns every valid user in input order.
    """
    if not query:
        return iter_records(User, users)
    matches = [user for user in iter_records(User, users) if _contains(user.username, query)]
    return sorted(matches, key=lambda user: user.username.casefold())


def search_users_by_date_range(
    users: Sequence[Any],
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[User]:
    if _no_bounds(start, end):
        return iter_records(User, users)
    return [
        user
        for user in iter_records(User, users)
        if is_date_in_range(parse_date(user.created_at), start, end)
    ]


def search_photos_by_user(photos: Sequence[Any], user_id: str | None) -> list[Photo]:
    if not user_id:
        return iter_records(Photo, photos)
    return [photo for photo in iter_records(Photo, photos) if photo.user_id == user_id]


def search_photos_by_date_range(
    photos: Sequence[Any],
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[Photo]:
    if _no_bounds(start, end):
        return iter_records(Photo, photos)
    return [
        photo
        for photo in iter_records(Photo, photos)
        if is_date_in_range(parse_date(photo.created_dat), start, end)
    ]


def search_photos_by_tags(
    photos: Sequence[Any],
    photo_tags: Sequence[Any],
    tags: Sequence[Any],
    tag_names: Iterable[str] | None,
) -> list[Photo]:
    """Keep photos carrying any of ``tag_names``; unknown names match nothing."""
    wanted = {name.strip().casefold() for name in (tag_names or []) if name and name.strip()}
    if not wanted:
        return iter_records(Photo, photos)

    tag_ids = {tag.id for tag in iter_records(Tag, tags) if tag.tag_name.casefold() in wanted}
    if not tag_ids:
        return []
    photo_ids = {
        link.photo_id for link in iter_records(PhotoTag, photo_tags) if link.tag_id in tag_ids
    }
    return [photo for photo in iter_records(Photo, photos) if photo.id in photo_ids]


def get_photos_with_min_likes(
    photos: Sequence[Any],
    likes: Sequence[Any],
    min_likes: int,
) -> list[Photo]:
    like_counts = Counter(like.photo_id for like in iter_records(Like, likes))
    return [
        photo for photo in iter_records(Photo, photos) if like_counts.get(photo.id, 0) >= min_likes
    ]


def search_comments_by_user(comments: Sequence[Any], user_id: str | None) -> list[Comment]:
    if not user_id:
        return iter_records(Comment, comments)
    return [comment for comment in iter_records(Comment, comments) if comment.user_id == user_id]


def search_comments_by_photo(comments: Sequence[Any], photo_id: str | None) -> list[Comment]:
    if not photo_id:
        return iter_records(Comment, comments)
    return [
        comment for comment in iter_records(Comment, comments) if comment.photo_id == photo_id
    ]


def search_comments_by_keyword(comments: Sequence[Any], keyword: str | None) -> list[Comment]:
    if not keyword:
        return iter_records(Comment, comments)
    return [
        comment
        for comment in iter_records(Comment, comments)
        if _contains(comment.comment_text, keyword)
    ]


def search_comments_by_date_range(
    comments: Sequence[Any],
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[Comment]:
    if _no_bounds(start, end):
        return iter_records(Comment, comments)
    return [
        comment
        for comment in iter_records(Comment, comments)
        if is_date_in_range(parse_date(comment.created_at), start, end)
    ]


def search_tags_by_name(tags: Sequence[Any], query: str | None) -> list[Tag]:
    if not query:
        return iter_records(Tag, tags)
    return [tag for tag in iter_records(Tag, tags) if _contains(tag.tag_name, query)]


def get_tags_by_popularity(
    tags: Sequence[Any],
    photo_tags: Sequence[Any],
    min_count: int = 0,
) -> list[Tag]:
    usage = Counter(link.tag_id for link in iter_records(PhotoTag, photo_tags))
    popular = [tag for tag in iter_records(Tag, tags) if usage.get(tag.id, 0) >= min_count]
    return sorted(popular, key=lambda tag: usage.get(tag.id, 0), reverse=True)


def get_followers(follows: Sequence[Any], user_id: str | None) -> list[str]:
    if not user_id:
        return []
    return [
        follow.follower_id
        for follow in iter_records(Follow, follows)
        if follow.followee_id == user_id
    ]


def get_following(follows: Sequence[Any], user_id: str | None) -> list[str]:
    if not user_id:
        return []
    return [
        follow.followee_id
        for follow in iter_records(Follow, follows)
        if follow.follower_id == user_id
    ]


def get_follows_in_date_range(
    follows: Sequence[Any],
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[Follow]:
    if _no_bounds(start, end):
        return iter_records(Follow, follows)
    return [
        follow
        for follow in iter_records(Follow, follows)
        if is_date_in_range(parse_date(follow.created_at), start, end)
    ]


def get_users_with_most_new_followers(
    follows: Sequence[Any],
    start: datetime | None = None,
    end: datetime | None = None,
) -> dict[str, int]:
    """New-follower counts per followee, most followed first."""
    in_range = get_follows_in_date_range(follows, start, end)
    counts = Counter(follow.followee_id for follow in iter_records(Follow, in_range))
    return dict(counts.most_common())
