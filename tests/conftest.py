from __future__ import annotations

from pathlib import Path

import pytest

SAMPLE_CSVS = {
    "users.csv": [
        "id,username,created_at",
        "1,alice,2024-01-01",
        "2,bob,02-01-2024 09:15",
        "3,carol,not-a-date",
        "4,,2024-01-03",
    ],
    "tags.csv": [
        "id,tag_name,created_at",
        "1,sunset,2024-01-01",
        "2,beach,2024-01-01",
    ],
    "photos.csv": [
        "id,image_url,user_id,created_dat",
        "10,http://img/10.jpg,1,2024-01-05 10:00:00",
        "11,http://img/11.jpg,2,2024-01-06",
        "12,,1,not-a-date",
    ],
    "photo_tags.csv": [
        "photo_id,tag_id",
        "10,1",
        "10,1",
        "11,2",
        "12,2",
    ],
    "likes.csv": [
        "user_id,photo_id,created_at",
        "2,10,2024-01-07",
        "3,10,2024-01-07",
        "1,11,2024-01-08",
        "1,999,2024-01-08",
    ],
    "follows.csv": [
        "follower_id,followee_id,created_at",
        "2,1,2024-01-02",
        "3,1,2024-01-03",
        "1,2,2024-01-04",
    ],
    "comments.csv": [
        "id,comment_text,user_id,photo_id,created_at",
        "100,Great sunset,2,10,2024-01-07",
        "101,Nice,1,11,2024-01-08",
        "102,,3,999,2024-01-09",
    ],
}


@pytest.fixture
def sample_data_dir(tmp_path: Path) -> Path:
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    for file_name, lines in SAMPLE_CSVS.items():
        (data_dir / file_name).write_text("\n".join(lines) + "\n", encoding="utf-8")
    return data_dir
