from __future__ import annotations

from pathlib import Path

import pytest

from social_insights.config import DataConfig
from social_insights.io.read import load_dataset, read_entity_csv
from social_insights.io.schema import Comment, Photo, User, validate_record


def test_load_dataset_reads_all_entities(sample_data_dir: Path) -> None:
    report = load_dataset(sample_data_dir)
    dataset = report.dataset

    assert dataset.row_counts() == {
        "users": 3,
        "tags": 2,
        "photos": 3,
        "photo_tags": 4,
        "likes": 4,
        "follows": 3,
        "comments": 3,
    }
    assert report.dropped_rows["users"] == 1
    assert report.missing_files == []


def test_load_dataset_keeps_raw_unparseable_dates(sample_data_dir: Path) -> None:
    dataset = load_dataset(sample_data_dir).dataset

    assert dataset.photos[2] == Photo(id="12", user_id="1", image_url="", created_dat="not-a-date")
    assert dataset.users[2].created_at == "not-a-date"
    assert dataset.comments[2] == Comment(
        id="102", user_id="3", photo_id="999", comment_text="", created_at="2024-01-09"
    )


def test_load_dataset_tolerates_missing_files(tmp_path: Path) -> None:
    (tmp_path / "users.csv").write_text(
        "id,username,created_at\n1,alice,2024-01-01\n", encoding="utf-8"
    )

    report = load_dataset(tmp_path, DataConfig())

    assert report.dataset.users == (User(id="1", username="alice", created_at="2024-01-01"),)
    assert report.dataset.photos == ()
    assert "photos.csv" in report.missing_files


def test_read_entity_csv_strips_bom_and_whitespace(tmp_path: Path) -> None:
    path = tmp_path / "users.csv"
    path.write_text("\ufeffid, username ,created_at\n 7 , dora ,2024-01-01\n", encoding="utf-8")

    records, dropped = read_entity_csv(path, User)

    assert records == [User(id="7", username="dora", created_at="2024-01-01")]
    assert dropped == 0


def test_read_entity_csv_raises_on_missing_required_column(tmp_path: Path) -> None:
    path = tmp_path / "photos.csv"
    path.write_text("id,image_url,created_dat\n1,x,2024-01-01\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Missing required columns in photos.csv: user_id"):
        read_entity_csv(path, Photo)


def test_read_entity_csv_handles_empty_file(tmp_path: Path) -> None:
    path = tmp_path / "users.csv"
    path.write_text("", encoding="utf-8")

    assert read_entity_csv(path, User) == ([], 0)


def test_validate_record_requires_mandatory_fields() -> None:
    assert validate_record(User, {"id": "1", "username": ""}) is None
    assert validate_record(Comment, {"id": "1", "user_id": "2"}) is None
    assert validate_record(Photo, {"id": "1", "user_id": "2"}) == Photo(id="1", user_id="2")
