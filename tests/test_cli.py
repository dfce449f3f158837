from __future__ import annotations

from pathlib import Path

import yaml
from typer.testing import CliRunner

from social_insights.cli import app

runner = CliRunner()


def _write_config(tmp_path: Path, data_dir: Path) -> Path:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.safe_dump({"data": {"data_dir": str(data_dir)}}), encoding="utf-8")
    return config_path


def test_cli_help_lists_commands() -> None:
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    assert "dashboard" in result.stdout
    assert "search" in result.stdout


def test_dashboard_command_writes_tables(
    monkeypatch, sample_data_dir: Path, tmp_path: Path
) -> None:
    monkeypatch.delenv("SOCIAL_INSIGHTS_DATA_DIR", raising=False)
    config_path = _write_config(tmp_path, sample_data_dir)
    out_dir = tmp_path / "out"

    result = runner.invoke(
        app,
        ["dashboard", "--config", str(config_path), "--out", str(out_dir), "--no-figures"],
    )

    assert result.exit_code == 0, result.stdout
    assert "Dashboard complete" in result.stdout
    assert (out_dir / "tables" / "most_used_tags.csv").exists()
    assert (out_dir / "summary" / "dashboard_summary.json").exists()


def test_dashboard_command_rejects_unknown_preset(
    monkeypatch, sample_data_dir: Path, tmp_path: Path
) -> None:
    monkeypatch.delenv("SOCIAL_INSIGHTS_DATA_DIR", raising=False)
    config_path = _write_config(tmp_path, sample_data_dir)

    result = runner.invoke(
        app,
        [
            "dashboard",
            "--config",
            str(config_path),
            "--out",
            str(tmp_path / "out"),
            "--time-range",
            "fortnight",
        ],
    )

    assert result.exit_code != 0


def test_search_command_reports_counts(monkeypatch, sample_data_dir: Path, tmp_path: Path) -> None:
    monkeypatch.delenv("SOCIAL_INSIGHTS_DATA_DIR", raising=False)
    config_path = _write_config(tmp_path, sample_data_dir)
    out_dir = tmp_path / "search-out"

    result = runner.invoke(
        app,
        [
            "search",
            "--config",
            str(config_path),
            "--username",
            "ali",
            "--tags",
            "Sunset",
            "--min-likes",
            "2",
            "--out",
            str(out_dir),
        ],
    )

    assert result.exit_code == 0, result.stdout
    assert "- filter: Username: ali" in result.stdout
    assert "- filter: Tags: sunset" in result.stdout
    assert "- users: 1" in result.stdout
    assert "- photos: 1" in result.stdout
    assert "- comments: 3" in result.stdout
    assert (out_dir / "tables" / "search_photos.csv").exists()


def test_search_command_rejects_bad_date(
    monkeypatch, sample_data_dir: Path, tmp_path: Path
) -> None:
    monkeypatch.delenv("SOCIAL_INSIGHTS_DATA_DIR", raising=False)
    config_path = _write_config(tmp_path, sample_data_dir)

    result = runner.invoke(
        app,
        ["search", "--config", str(config_path), "--photos-from", "yesterday-ish"],
    )

    assert result.exit_code != 0


def test_dashboard_command_reports_missing_csv_column_as_usage_error(
    monkeypatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("SOCIAL_INSIGHTS_DATA_DIR", raising=False)
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    (data_dir / "users.csv").write_text("id,created_at\n1,2024-01-01\n", encoding="utf-8")
    config_path = _write_config(tmp_path, data_dir)

    result = runner.invoke(
        app,
        [
            "dashboard",
            "--config",
            str(config_path),
            "--out",
            str(tmp_path / "out"),
            "--no-figures",
        ],
    )

    assert result.exit_code == 2
    assert "Missing required columns in users.csv" in result.output


def test_search_command_reports_invalid_config_as_usage_error(
    monkeypatch, sample_data_dir: Path, tmp_path: Path
) -> None:
    monkeypatch.delenv("SOCIAL_INSIGHTS_DATA_DIR", raising=False)
    config_path = tmp_path / "config.yaml"
    config_path.write_text("database:\n  url: postgres://\n", encoding="utf-8")

    result = runner.invoke(
        app,
        ["search", "--config", str(config_path), "--data-dir", str(sample_data_dir)],
    )

    assert result.exit_code == 2
    assert "Invalid config" in result.output


def test_search_command_date_only_end_includes_that_day(
    monkeypatch, sample_data_dir: Path, tmp_path: Path
) -> None:
    monkeypatch.delenv("SOCIAL_INSIGHTS_DATA_DIR", raising=False)
    config_path = _write_config(tmp_path, sample_data_dir)

    result = runner.invoke(
        app,
        ["search", "--config", str(config_path), "--photos-to", "2024-01-05"],
    )

    assert result.exit_code == 0, result.output
    assert "- filter: Photos from: start - 2024-01-05" in result.output
    assert "- photos: 1" in result.output
