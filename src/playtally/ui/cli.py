from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from playtally.app import (
    clean_top_entities,
    derive_leaderboards,
    fetch_recent_plays,
    fetch_top_entities,
    import_streaming_export,
    merge_recent_plays,
    summarize_leaderboard,
)
from playtally.config import configure_logging
from playtally.config.ollama import FAST_OLLAMA_MODEL
from playtally.domain.model import EntityKind, ResolverPolicy

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from playtally.app import CleanReport

log = logging.getLogger(__name__)


def _parse_kind(value: str) -> EntityKind:
    normalized = value.strip().lower().removesuffix("s")
    try:
        return EntityKind(normalized)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Unknown entity kind: {value}") from exc


def _add_policy_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--policy",
        type=ResolverPolicy,
        choices=list(ResolverPolicy),
        default=ResolverPolicy.AUTO,
        help="How ambiguous name clusters are decided (default: %(default)s)",
    )
    parser.add_argument("--model", type=str, help="Ollama model for the oracle policy")
    parser.add_argument(
        "--fast",
        action="store_true",
        help=f"Use the faster {FAST_OLLAMA_MODEL} model for the oracle policy",
    )


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Consolidate listening history leaderboards")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    fetch = subparsers.add_parser("fetch", help="Fetch raw top songs/albums/artists")
    fetch.add_argument("kind", type=_parse_kind, help="songs, albums or artists")
    fetch.add_argument(
        "--total-calls",
        type=int,
        help="Maximum number of pages to request (defaults to config)",
    )

    clean = subparsers.add_parser("clean", help="Consolidate the latest raw fetch")
    clean.add_argument("kind", type=_parse_kind, help="songs, albums or artists")
    clean.add_argument("--input", type=Path, help="Raw fetch file (default: latest)")
    _add_policy_arguments(clean)

    recent = subparsers.add_parser("recent", help="Fetch recently played tracks from Spotify")
    recent.add_argument("--limit", type=int, default=50, help="Plays to fetch (max 50)")

    merge = subparsers.add_parser("merge", help="Merge recent plays into the complete history")
    merge.add_argument("--recent", type=Path, help="Recent plays file (default: latest)")
    merge.add_argument("--history", type=Path, help="History file (default: latest)")

    export = subparsers.add_parser(
        "import-export", help="Build the complete history from a streaming history export"
    )
    export.add_argument("directory", type=Path, help="Directory with Streaming_History_Audio_*")
    export.add_argument(
        "--enrich",
        action="store_true",
        help="Look up albums, artwork and genres from the Spotify catalogue",
    )

    derive = subparsers.add_parser("derive", help="Derive leaderboards from the complete history")
    derive.add_argument(
        "--kinds",
        type=_parse_kind,
        nargs="+",
        default=list(EntityKind),
        help="Entity kinds to derive (default: all)",
    )
    derive.add_argument("--history", type=Path, help="History file (default: latest)")
    _add_policy_arguments(derive)

    summary = subparsers.add_parser("summary", help="Summarize a leaderboard by artist and genre")
    summary.add_argument(
        "kind", type=_parse_kind, nargs="?", default=EntityKind.ALBUM, help="default: albums"
    )
    summary.add_argument("--input", type=Path, help="Leaderboard file (default: latest)")
    summary.add_argument("--genres", type=int, default=20, help="Genres to list")

    args = parser.parse_args(list(argv))
    for name in ("total_calls", "limit", "genres"):
        value = getattr(args, name, None)
        if value is not None and value <= 0:
            raise ValueError(f"--{name.replace('_', '-')} must be positive")
    return args


def _oracle_model(args: argparse.Namespace) -> str | None:
    if args.model:
        return args.model
    return FAST_OLLAMA_MODEL if args.fast else None


def _log_clean_report(report: CleanReport) -> None:
    counts = report.result.counts
    decisions = report.decision_summary
    log.info(
        f"{report.kind.plural}: {counts.original_total} -> {counts.consolidated_total} "
        f"({counts.duplicates_removed} duplicates removed, {counts.consolidation_rate}%)"
    )
    if decisions.total:
        bands = ", ".join(f"{band}={count}" for band, count in decisions.by_band.items())
        log.info(
            f"Resolver decisions: {decisions.consolidated} merged, "
            f"{decisions.kept_separate} kept separate ({bands})"
        )
    for item in decisions.needs_review:
        log.info(
            f"  review: {item.attribution_name}: {' | '.join(item.member_names)} "
            f"({item.decision.confidence:.2f}) {item.decision.reasoning}"
        )
    for entity in report.result.entities[:10]:
        log.info(
            f"  {entity.rank:>3}. {entity.canonical_name} - {entity.attribution_name or ''} "
            f"({entity.play_count} plays, {entity.member_count} variants)"
        )
    log.info(f"Saved {report.output_path}")
    if report.rules_path is not None:
        log.info(f"Added {len(report.result.new_rules)} rules to {report.rules_path}")


def _run(args: argparse.Namespace) -> None:
    match args.command:
        case "fetch":
            fetch_report = fetch_top_entities(args.kind, total_calls=args.total_calls)
            log.info(
                f"{fetch_report.successful_calls} of {fetch_report.calls_made} fetch calls "
                f"succeeded; {fetch_report.collected} {args.kind.plural} saved to "
                f"{fetch_report.path}"
            )
        case "clean":
            _log_clean_report(
                clean_top_entities(
                    args.kind,
                    policy=args.policy,
                    input_path=args.input,
                    ollama_model=_oracle_model(args),
                )
            )
        case "recent":
            path = fetch_recent_plays(limit=args.limit)
            log.info(f"Saved recent plays to {path}")
        case "merge":
            merge_report = merge_recent_plays(recent_path=args.recent, history_path=args.history)
            meta = merge_report.history.metadata
            log.info(
                f"Merged {merge_report.merged} plays: {meta.total_entities} songs, "
                f"{meta.total_events} events, {meta.date_range.earliest} to "
                f"{meta.date_range.latest}"
            )
            log.info(f"Saved {merge_report.path}")
        case "import-export":
            import_report = import_streaming_export(args.directory, enrich=args.enrich)
            meta = import_report.history.metadata
            log.info(
                f"Imported {import_report.merged} plays into {meta.total_entities} songs; "
                f"saved {import_report.path}"
            )
        case "derive":
            for report in derive_leaderboards(
                args.kinds,
                policy=args.policy,
                history_path=args.history,
                ollama_model=_oracle_model(args),
            ):
                _log_clean_report(report)
        case "summary":
            summary = summarize_leaderboard(args.kind, path=args.input, genre_limit=args.genres)
            log.info(f"Summary of {summary.path}")
            for position, group in enumerate(summary.attributions, start=1):
                log.info(
                    f"{position:>4}. {group.attribution_name}: {group.entity_count} "
                    f"{args.kind.plural}, {group.total_plays} plays"
                )
            for position, standing in enumerate(summary.genres, start=1):
                log.info(
                    f"{position:>4}. {standing.genre}: {standing.entity_count} "
                    f"{args.kind.plural}, {standing.total_plays} plays"
                )
        case _:
            raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
    try:
        _run(parsed_args)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
