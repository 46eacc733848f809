"""CLI for the pulsetrack workout analytics engine."""

from __future__ import annotations

import json
import logging
from datetime import date, datetime

import click

from pulsetrack.analytics.zones import DEFAULT_MAX_HEART_RATE


max_hr_option = click.option(
    "--max-hr",
    default=DEFAULT_MAX_HEART_RATE,
    type=int,
    envvar="PULSETRACK_MAX_HR",
    show_default=True,
    help="Athlete max heart rate used for zones and scores.",
)

date_type = click.DateTime(["%Y-%m-%d"])


def _day(value: datetime | None) -> date | None:
    return value.date() if value is not None else None


def _detect(
    file: str,
    max_hr: int,
    start: date | None = None,
    end: date | None = None,
    sport: str | None = None,
    min_duration: float | None = None,
    max_gap: float | None = None,
) -> tuple[list, list, list]:
    """Load, filter and segment a telemetry export.

    Returns ``(samples, sessions, discarded_spans)``; engine errors are
    re-raised as ClickException so click prints them and exits non-zero.
    """
    from dataclasses import replace

    from pulsetrack.analytics.pipeline import detect_sessions
    from pulsetrack.analytics.zones import ZoneConfig
    from pulsetrack.errors import PulsetrackError
    from pulsetrack.telemetry import DEFAULT_DETECTION_CONFIG, filter_samples, load_samples

    discarded: list = []
    try:
        config = DEFAULT_DETECTION_CONFIG
        if min_duration is not None:
            config = replace(config, min_session_duration_minutes=min_duration)
        if max_gap is not None:
            config = replace(config, max_gap_minutes=max_gap)

        samples = filter_samples(
            load_samples(file), config, start_date=start, end_date=end, sport=sport,
        )
        found = detect_sessions(
            samples, config, ZoneConfig(max_heart_rate=max_hr), on_discard=discarded.append,
        )
    except PulsetrackError as e:
        raise click.ClickException(str(e)) from e

    return samples, found, discarded


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log debug diagnostics (discarded sessions).")
def main(verbose: bool) -> None:
    """pulsetrack — workout session detection and training load analytics."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")


@main.command()
@click.argument("file", type=click.Path(exists=True))
@max_hr_option
@click.option("--min-duration", default=None, type=float, help="Minimum session minutes (default 10).")
@click.option("--max-gap", default=None, type=float, help="Max gap in minutes before a session ends (default 5).")
@click.option("--sport", default=None, help="Only include samples for this sport.")
@click.option("--start", default=None, type=date_type, help="First day, inclusive (YYYY-MM-DD).")
@click.option("--end", default=None, type=date_type, help="Last day, inclusive (YYYY-MM-DD).")
@click.option("--output", "-o", default=None, help="Write sessions as JSON to file.")
def sessions(
    file: str,
    max_hr: int,
    min_duration: float | None,
    max_gap: float | None,
    sport: str | None,
    start: datetime | None,
    end: datetime | None,
    output: str | None,
) -> None:
    """Detect workout sessions in a telemetry export."""
    samples, found, discarded = _detect(
        file, max_hr, _day(start), _day(end), sport, min_duration, max_gap,
    )

    click.echo(f"{len(samples)} samples → {len(found)} session(s), "
               f"{len(discarded)} short candidate(s) discarded")
    for s in found:
        avg = s.avg_heart_rate if s.avg_heart_rate is not None else "-"
        trimp = s.trimp_score if s.trimp_score is not None else "-"
        click.echo(f"  {s.session_start:%Y-%m-%d %H:%M}  {s.sport:<12} "
                   f"{s.duration_min:>4} min  avg {avg:>3} bpm  "
                   f"TRIMP {trimp:>5}  {s.calories_burned} kcal")

    if output:
        with open(output, "w") as f:
            json.dump([s.to_dict() for s in found], f, indent=2)
        click.echo(f"\nSessions written to {output}")


@main.command()
@click.argument("file", type=click.Path(exists=True))
@click.option("--week-start", required=True, type=date_type,
              help="First day of the week (YYYY-MM-DD).")
@max_hr_option
def zones(file: str, week_start: datetime, max_hr: int) -> None:
    """Weekly heart-rate zone breakdown."""
    from pulsetrack.analytics.aggregate import week_range, weekly_zone_breakdown, zone_analysis

    first, last = week_range(week_start.date())
    _, found, _ = _detect(file, max_hr, first, last)

    breakdown = weekly_zone_breakdown(found)
    analysis = zone_analysis(found)

    click.echo(f"\n{'=' * 40}")
    click.echo(f"  Week {first.isoformat()} → {last.isoformat()}")
    click.echo(f"{'=' * 40}")
    for zone, minutes in breakdown.items():
        click.echo(f"  {zone}: {minutes:>5} min ({analysis.zone_percentages[zone]}%)")
    click.echo(f"  Sessions:  {analysis.sessions_analyzed}")
    click.echo(f"  Duration:  {analysis.total_duration_minutes} min")
    click.echo(f"  Calories:  {analysis.total_calories}")
    click.echo(f"{'=' * 40}")


@main.command()
@click.argument("file", type=click.Path(exists=True))
@click.option("--start", default=None, type=date_type, help="First day, inclusive (YYYY-MM-DD).")
@click.option("--end", default=None, type=date_type, help="Last day, inclusive (YYYY-MM-DD).")
@max_hr_option
def load(file: str, start: datetime | None, end: datetime | None, max_hr: int) -> None:
    """Daily training load (TRIMP) trend."""
    from pulsetrack.analytics.aggregate import training_load_trend

    _, found, _ = _detect(file, max_hr, _day(start), _day(end))

    trend = training_load_trend(found)
    if not trend:
        click.echo("No sessions in range.")
        return
    for point in trend:
        click.echo(f"  {point.date.isoformat()}  {point.trimp_score:>6}")


@main.command()
@click.argument("file", type=click.Path(exists=True))
def sports(file: str) -> None:
    """Per-sport breakdown of raw samples."""
    from pulsetrack.analytics.aggregate import sport_breakdown
    from pulsetrack.errors import PulsetrackError
    from pulsetrack.telemetry import load_samples

    try:
        samples = load_samples(file)
    except PulsetrackError as e:
        raise click.ClickException(str(e)) from e

    summaries = sport_breakdown(samples)
    if not summaries:
        click.echo("No labelled samples.")
        return
    for s in summaries:
        avg = s.avg_heart_rate if s.avg_heart_rate is not None else "-"
        click.echo(f"  {s.sport:<12} {s.record_count:>7} samples  "
                   f"{s.unique_days:>3} day(s)  avg {avg} bpm")


if __name__ == "__main__":
    main()
