from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from pathlib import Path

import pandas as pd
import typer
import yaml
from pydantic import ValidationError

from social_insights.config import DEFAULT_CONFIG_PATH, TIME_RANGE_PRESETS, AppConfig, load_config
from social_insights.io.read import load_dataset
from social_insights.io.schema import Comment, Follow, Photo, Tag, User, entity_columns
from social_insights.io.write import write_table
from social_insights.logging import configure_logging
from social_insights.paths import build_output_paths
from social_insights.pipeline.dashboard import build_dashboard_artifacts
from social_insights.pipeline.search import SearchCriteria, apply_search_filters, parse_tag_list
from social_insights.preprocess.time import parse_date, parse_range_end, resolve_time_range

app = typer.Typer(no_args_is_help=True, add_completion=False)


def _load_app_config(config_path: Path) -> AppConfig:
    try:
        return load_config(config_path)
    except (ValueError, ValidationError, yaml.YAMLError) as exc:
        raise typer.BadParameter(f"Invalid config {config_path}: {exc}") from exc


def _resolve_data_dir(data_dir: Path | None, cfg: AppConfig) -> Path:
    resolved = data_dir or Path(cfg.data.data_dir)
    if not resolved.is_dir():
        raise typer.BadParameter(
            f"Data directory not found: {resolved}. Set --data-dir or data.data_dir in config."
        )
    return resolved


def _parse_bound(value: str | None, option_name: str, *, is_end: bool = False) -> datetime | None:
    if not value:
        return None
    parsed = parse_range_end(value) if is_end else parse_date(value)
    if parsed is None:
        raise typer.BadParameter(f"Unrecognized date for {option_name}: {value}")
    return parsed


def _range_or_none(
    start: str | None,
    end: str | None,
    start_name: str,
    end_name: str,
) -> tuple[datetime | None, datetime | None] | None:
    bounds = (_parse_bound(start, start_name), _parse_bound(end, end_name, is_end=True))
    if bounds == (None, None):
        return None
    return bounds


@app.command()
def dashboard(
    data_dir: Path | None = typer.Option(None, file_okay=False, resolve_path=True),
    out: Path = typer.Option(Path("out"), resolve_path=True),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
    time_range: str | None = typer.Option(
        None,
        help=f"Relative range preset: {', '.join(TIME_RANGE_PRESETS)}. Defaults to config.",
    ),
    start: str | None = typer.Option(None, help="Explicit range start; overrides --time-range."),
    end: str | None = typer.Option(
        None, help="Explicit range end, inclusive; a date without a time covers that whole day."
    ),
    figures: bool = typer.Option(True, help="Render chart images alongside tables."),
) -> None:
    """Compute every dashboard aggregate and write tables, figures, and a summary."""
    configure_logging()
    cfg = _load_app_config(config)
    resolved_data_dir = _resolve_data_dir(data_dir, cfg)

    preset = time_range or cfg.time.default_range
    try:
        range_start, range_end = resolve_time_range(preset)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    if start or end:
        range_start = _parse_bound(start, "--start")
        range_end = _parse_bound(end, "--end", is_end=True)

    try:
        tables = build_dashboard_artifacts(
            data_dir=resolved_data_dir,
            out_dir=out,
            config=cfg,
            start=range_start,
            end=range_end,
            render_figures=figures,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    typer.echo(f"Dashboard complete. Tables: {', '.join(sorted(tables.keys()))}")


@app.command()
def search(
    data_dir: Path | None = typer.Option(None, file_okay=False, resolve_path=True),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, exists=True, readable=True, resolve_path=True),
    out: Path | None = typer.Option(
        None, resolve_path=True, help="Write matching records as tables under this directory."
    ),
    username: str = typer.Option("", help="Case-insensitive username substring."),
    users_from: str | None = typer.Option(None),
    users_to: str | None = typer.Option(None),
    photo_user: str = typer.Option("", help="Only photos posted by this user id."),
    photos_from: str | None = typer.Option(None),
    photos_to: str | None = typer.Option(None),
    tags: str = typer.Option("", help="Comma separated tag names."),
    min_likes: int = typer.Option(0, min=0),
    comment_user: str = typer.Option("", help="Only comments written by this user id."),
    comment_photo: str = typer.Option("", help="Only comments on this photo id."),
    keyword: str = typer.Option("", help="Case-insensitive comment text substring."),
    comments_from: str | None = typer.Option(None),
    comments_to: str | None = typer.Option(None),
    tag_query: str = typer.Option("", help="Case-insensitive tag name substring."),
    follows_from: str | None = typer.Option(None),
    follows_to: str | None = typer.Option(None),
) -> None:
    """Apply chained search filters to the dataset and report the matches."""
    configure_logging()
    cfg = _load_app_config(config)
    resolved_data_dir = _resolve_data_dir(data_dir, cfg)

    criteria = SearchCriteria(
        username=username,
        user_created=_range_or_none(users_from, users_to, "--users-from", "--users-to"),
        photo_user_id=photo_user,
        photo_created=_range_or_none(photos_from, photos_to, "--photos-from", "--photos-to"),
        photo_tags=parse_tag_list(tags),
        min_likes=min_likes,
        comment_user_id=comment_user,
        comment_photo_id=comment_photo,
        comment_keyword=keyword,
        comment_created=_range_or_none(
            comments_from, comments_to, "--comments-from", "--comments-to"
        ),
        tag_query=tag_query,
        follow_created=_range_or_none(follows_from, follows_to, "--follows-from", "--follows-to"),
    )
    try:
        dataset = load_dataset(resolved_data_dir, cfg.data).dataset
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    results = apply_search_filters(dataset, criteria)

    typer.echo("Search complete")
    for label in results.active_filters:
        typer.echo(f"- filter: {label}")
    matches = {
        "users": (User, results.users),
        "photos": (Photo, results.photos),
        "comments": (Comment, results.comments),
        "tags": (Tag, results.tags),
        "follows": (Follow, results.follows),
    }
    for name, (_entity_type, records) in matches.items():
        typer.echo(f"- {name}: {len(records)}")

    if out is not None:
        paths = build_output_paths(out)
        fmt = cfg.outputs.tables_format
        for name, (entity_type, records) in matches.items():
            frame = pd.DataFrame(
                [asdict(record) for record in records], columns=entity_columns(entity_type)
            )
            write_table(frame, paths.tables / f"search_{name}.{fmt}", fmt=fmt)
        typer.echo(f"- tables: {paths.tables}")


if __name__ == "__main__":
    app()
