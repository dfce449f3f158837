from __future__ import annotations

from datetime import datetime
from pathlib import Path

from social_insights.io.read import load_dataset
from social_insights.pipeline.search import SearchCriteria, apply_search_filters, parse_tag_list


def test_parse_tag_list_normalizes_names() -> None:
    assert parse_tag_list(" Sunset, beach ,,FOOD ") == ("sunset", "beach", "food")
    assert parse_tag_list("") == ()
    assert parse_tag_list(None) == ()


def test_empty_criteria_return_everything(sample_data_dir: Path) -> None:
    dataset = load_dataset(sample_data_dir).dataset

    results = apply_search_filters(dataset, SearchCriteria())

    assert results.users == list(dataset.users)
    assert results.photos == list(dataset.photos)
    assert results.follows == list(dataset.follows)
    assert results.active_filters == []


def test_photo_criteria_chain_with_and_semantics(sample_data_dir: Path) -> None:
    dataset = load_dataset(sample_data_dir).dataset
    criteria = SearchCriteria(photo_user_id="1", photo_tags=("sunset",), min_likes=2)

    results = apply_search_filters(dataset, criteria)

    assert [photo.id for photo in results.photos] == ["10"]
    assert results.active_filters == [
        "Photos by: alice",
        "Tags: sunset",
        "Min likes: 2",
    ]


def test_date_and_text_criteria_are_labelled(sample_data_dir: Path) -> None:
    dataset = load_dataset(sample_data_dir).dataset
    criteria = SearchCriteria(
        username="o",
        user_created=(datetime(2024, 1, 2), None),
        comment_keyword="SUNSET",
        tag_query="bea",
        follow_created=(None, datetime(2024, 1, 3)),
    )

    results = apply_search_filters(dataset, criteria)

    assert [user.username for user in results.users] == ["bob"]
    assert [comment.id for comment in results.comments] == ["100"]
    assert [tag.tag_name for tag in results.tags] == ["beach"]
    assert len(results.follows) == 2
    assert results.active_filters == [
        "Username: o",
        "User created: 2024-01-02 - now",
        "Keyword: SUNSET",
        "Tag name: bea",
        "Follows from: start - 2024-01-03",
    ]


def test_unknown_photo_owner_keeps_raw_id_in_label(sample_data_dir: Path) -> None:
    dataset = load_dataset(sample_data_dir).dataset

    results = apply_search_filters(dataset, SearchCriteria(photo_user_id="42"))

    assert results.photos == []
    assert results.active_filters == ["Photos by: 42"]
