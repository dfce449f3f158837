from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Sequence

import pandas as pd

from social_insights.features.records import (
    ActiveUser,
    CommentedPhoto,
    DailyCount,
    EngagingUser,
    FollowedUser,
    LikedPhoto,
    TagDayCounts,
    TagUsage,
    UserTagPreferences,
)
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
from social_insights.preprocess.time import day_key, parse_in_range

UNKNOWN_USERNAME = "Unknown"


def _tally(keys: Iterable[str]) -> pd.Series:
    return pd.Series(list(keys), dtype="object").value_counts()


def _mapped_counts(ids: pd.Series, tally: pd.Series) -> pd.Series:
    return ids.map(tally).fillna(0).astype(int)


def _rank(frame: pd.DataFrame, score: pd.Series) -> pd.DataFrame:
    # mergesort keeps input order among equal scores.
    return frame.assign(score=score).sort_values("score", ascending=False, kind="mergesort")


def _daily_counts(
    dates: Iterable[Any],
    start: datetime | None,
    end: datetime | None,
) -> list[DailyCount]:
    days = []
    for raw in dates:
        parsed = parse_in_range(raw, start, end)
        if parsed is not None:
            days.append(day_key(parsed))
    counts = _tally(days).sort_index()
    return [DailyCount(date=str(day), count=int(count)) for day, count in counts.items()]


def _qualifying_photos(
    photos: Sequence[Photo],
    start: datetime | None,
    end: datetime | None,
) -> dict[str, datetime]:
    qualifying: dict[str, datetime] = {}
    for photo in photos:
        parsed = parse_in_range(photo.created_dat, start, end)
        if parsed is not None:
            qualifying[photo.id] = parsed
    return qualifying


def _usernames(users: Sequence[User]) -> dict[str, str]:
    return {user.id: user.username for user in users}


def get_new_users_over_time(
    users: Sequence[Any],
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[DailyCount]:
    return _daily_counts((user.created_at for user in iter_records(User, users)), start, end)


def get_photo_likes_trend(
    likes: Sequence[Any],
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[DailyCount]:
    return _daily_counts((like.created_at for like in iter_records(Like, likes)), start, end)


def get_follower_growth_over_time(
    follows: Sequence[Any],
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[DailyCount]:
    return _daily_counts(
        (follow.created_at for follow in iter_records(Follow, follows)), start, end
    )


def get_comments_over_time(
    comments: Sequence[Any],
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[DailyCount]:
    return _daily_counts(
        (comment.created_at for comment in iter_records(Comment, comments)), start, end
    )


def get_photos_over_time(
    photos: Sequence[Any],
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[DailyCount]:
    return _daily_counts((photo.created_dat for photo in iter_records(Photo, photos)), start, end)


def get_most_active_users(
    users: Sequence[Any],
    photos: Sequence[Any],
    likes: Sequence[Any],
    comments: Sequence[Any],
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[ActiveUser]:
    """Rank users by photos posted plus likes and comments given."""
    user_records = iter_records(User, users)
    if not user_records:
        return []

    posts = _tally(
        photo.user_id
        for photo in iter_records(Photo, photos)
        if parse_in_range(photo.created_dat, start, end) is not None
    )
    likes_given = _tally(
        like.user_id
        for like in iter_records(Like, likes)
        if parse_in_range(like.created_at, start, end) is not None
    )
    comments_given = _tally(
        comment.user_id
        for comment in iter_records(Comment, comments)
        if parse_in_range(comment.created_at, start, end) is not None
    )

    frame = pd.DataFrame(
        {
            "user_id": [user.id for user in user_records],
            "username": [user.username for user in user_records],
        }
    )
    frame["posts"] = _mapped_counts(frame["user_id"], posts)
    frame["likes"] = _mapped_counts(frame["user_id"], likes_given)
    frame["comments"] = _mapped_counts(frame["user_id"], comments_given)
    ranked = _rank(frame, frame["posts"] + frame["likes"] + frame["comments"])
    return [
        ActiveUser(
            username=row.username,
            posts=int(row.posts),
            likes=int(row.likes),
            comments=int(row.comments),
        )
        for row in ranked.itertuples(index=False)
    ]


def _photo_ranking_frame(
    photos: Sequence[Photo],
    users: Sequence[User],
    event_counts: pd.Series,
) -> pd.DataFrame:
    frame = pd.DataFrame(
        {
            "photo_id": [photo.id for photo in photos],
            "user_id": [photo.user_id for photo in photos],
        }
    )
    frame["username"] = frame["user_id"].map(_usernames(users)).fillna(UNKNOWN_USERNAME)
    frame["events"] = _mapped_counts(frame["photo_id"], event_counts)
    return _rank(frame, frame["events"])


def get_top_liked_photos(
    photos: Sequence[Any],
    likes: Sequence[Any],
    users: Sequence[Any],
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[LikedPhoto]:
    photo_records = iter_records(Photo, photos)
    if not photo_records:
        return []
    like_counts = _tally(
        like.photo_id
        for like in iter_records(Like, likes)
        if parse_in_range(like.created_at, start, end) is not None
    )
    ranked = _photo_ranking_frame(photo_records, iter_records(User, users), like_counts)
    return [
        LikedPhoto(photo_id=row.photo_id, username=row.username, likes=int(row.events))
        for row in ranked.itertuples(index=False)
    ]


def get_top_commented_photos(
    photos: Sequence[Any],
    comments: Sequence[Any],
    users: Sequence[Any],
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[CommentedPhoto]:
    photo_records = iter_records(Photo, photos)
    if not photo_records:
        return []
    comment_counts = _tally(
        comment.photo_id
        for comment in iter_records(Comment, comments)
        if parse_in_range(comment.created_at, start, end) is not None
    )
    ranked = _photo_ranking_frame(photo_records, iter_records(User, users), comment_counts)
    return [
        CommentedPhoto(photo_id=row.photo_id, username=row.username, comments=int(row.events))
        for row in ranked.itertuples(index=False)
    ]


def get_most_engaging_users(
    users: Sequence[Any],
    photos: Sequence[Any],
    likes: Sequence[Any],
    comments: Sequence[Any],
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[EngagingUser]:
    """Rank users by likes and comments received on their own photos.

    Events are attributed to the photo owner, not the actor. Events on a
    photo that does not exist are dropped.
    """
    user_records = iter_records(User, users)
    if not user_records:
        return []
    photo_owner = {photo.id: photo.user_id for photo in iter_records(Photo, photos)}

    likes_received = _tally(
        photo_owner[like.photo_id]
        for like in iter_records(Like, likes)
        if like.photo_id in photo_owner
        and parse_in_range(like.created_at, start, end) is not None
    )
    comments_received = _tally(
        photo_owner[comment.photo_id]
        for comment in iter_records(Comment, comments)
        if comment.photo_id in photo_owner
        and parse_in_range(comment.created_at, start, end) is not None
    )

    frame = pd.DataFrame(
        {
            "user_id": [user.id for user in user_records],
            "username": [user.username for user in user_records],
        }
    )
    frame["likes"] = _mapped_counts(frame["user_id"], likes_received)
    frame["comments"] = _mapped_counts(frame["user_id"], comments_received)
    ranked = _rank(frame, frame["likes"] + frame["comments"])
    return [
        EngagingUser(username=row.username, likes=int(row.likes), comments=int(row.comments))
        for row in ranked.itertuples(index=False)
    ]


def get_most_followed_users(
    users: Sequence[Any],
    follows: Sequence[Any],
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[FollowedUser]:
    user_records = iter_records(User, users)
    if not user_records:
        return []
    follower_counts = _tally(
        follow.followee_id
        for follow in iter_records(Follow, follows)
        if parse_in_range(follow.created_at, start, end) is not None
    )
    frame = pd.DataFrame(
        {
            "user_id": [user.id for user in user_records],
            "username": [user.username for user in user_records],
        }
    )
    frame["followers"] = _mapped_counts(frame["user_id"], follower_counts)
    ranked = _rank(frame, frame["followers"])
    return [
        FollowedUser(username=row.username, followers=int(row.followers))
        for row in ranked.itertuples(index=False)
    ]


def get_most_used_tags(
    tags: Sequence[Any],
    photo_tags: Sequence[Any],
    photos: Sequence[Any],
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[TagUsage]:
    """Count tag usage over photos whose ``created_dat`` parses and falls in range."""
    tag_records = iter_records(Tag, tags)
    if not tag_records:
        return []
    qualifying = _qualifying_photos(iter_records(Photo, photos), start, end)
    usage = _tally(
        link.tag_id for link in iter_records(PhotoTag, photo_tags) if link.photo_id in qualifying
    )
    frame = pd.DataFrame(
        {
            "tag_id": [tag.id for tag in tag_records],
            "name": [tag.tag_name for tag in tag_records],
        }
    )
    frame["count"] = _mapped_counts(frame["tag_id"], usage)
    ranked = _rank(frame, frame["count"])
    return [
        TagUsage(name=row.name, count=int(row.score)) for row in ranked.itertuples(index=False)
    ]


def get_trending_tags_over_time(
    tags: Sequence[Any],
    photo_tags: Sequence[Any],
    photos: Sequence[Any],
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[TagDayCounts]:
    """Per-day tag counts keyed by the tagged photo's creation day.

    Each row only carries tags seen that day. Picking which tags to chart is
    left to the caller.
    """
    photo_days = {
        photo_id: day_key(created)
        for photo_id, created in _qualifying_photos(iter_records(Photo, photos), start, end).items()
    }
    tag_names = {tag.id: tag.tag_name for tag in iter_records(Tag, tags)}

    rows = [
        (photo_days[link.photo_id], tag_names[link.tag_id])
        for link in iter_records(PhotoTag, photo_tags)
        if link.photo_id in photo_days and link.tag_id in tag_names
    ]
    if not rows:
        return []

    counts = (
        pd.DataFrame(rows, columns=["date", "tag_name"])
        .groupby(["date", "tag_name"], sort=False)
        .size()
    )
    by_day: dict[str, dict[str, int]] = {}
    for (day, tag_name), count in counts.items():
        by_day.setdefault(str(day), {})[str(tag_name)] = int(count)
    return [TagDayCounts(date=day, tag_counts=by_day[day]) for day in sorted(by_day)]


def get_user_preferences_by_tags(
    users: Sequence[Any],
    photos: Sequence[Any],
    photo_tags: Sequence[Any],
    tags: Sequence[Any],
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[UserTagPreferences]:
    """Per-user tag usage across the user's own qualifying photos."""
    user_records = iter_records(User, users)
    photo_records = iter_records(Photo, photos)
    qualifying = _qualifying_photos(photo_records, start, end)
    photo_owner = {photo.id: photo.user_id for photo in photo_records if photo.id in qualifying}
    tag_names = {tag.id: tag.tag_name for tag in iter_records(Tag, tags)}

    rows = [
        (photo_owner[link.photo_id], tag_names[link.tag_id])
        for link in iter_records(PhotoTag, photo_tags)
        if link.photo_id in photo_owner and link.tag_id in tag_names
    ]
    if not user_records or not rows:
        return []

    counts = (
        pd.DataFrame(rows, columns=["user_id", "tag_name"])
        .groupby(["user_id", "tag_name"], sort=False)
        .size()
    )
    preferences_by_user: dict[str, dict[str, int]] = {}
    for (user_id, tag_name), count in counts.items():
        preferences_by_user.setdefault(str(user_id), {})[str(tag_name)] = int(count)

    preferences = [
        UserTagPreferences(
            username=user.username,
            tag_preferences=dict(preferences_by_user[user.id]),
        )
        for user in user_records
        if preferences_by_user.get(user.id)
    ]
    # sorted() is stable, so equal totals keep user order.
    return sorted(preferences, key=lambda entry: entry.total, reverse=True)
