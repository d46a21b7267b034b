"""CLI entry point for candidate triage."""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

from cvtriage.core.config import Settings
from cvtriage.core.db import init_db, insert_upload, list_records
from cvtriage.core.verticals import (
    BUILT_IN_PRESETS,
    BUILT_IN_VERTICALS,
    PresetId,
    RuleSelection,
    VerticalId,
    preset_config,
    vertical_config,
)
from cvtriage.pipeline.advanced import AdvancedFilters
from cvtriage.pipeline.dashboard import View, build_dashboard
from cvtriage.pipeline.export import export_csv, export_json
from cvtriage.pipeline.normalize import effective_date, record_score


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Candidate triage - extract CVs, then qualify, dedupe and rank candidates",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML file (default: built-in settings)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )
    subparsers = parser.add_subparsers(dest="command")

    # --- ingest subcommand ---
    ingest_parser = subparsers.add_parser("ingest", help="Extract candidate data from CV files")
    ingest_parser.add_argument("files", nargs="+", help="CV files (.pdf, .txt, .md)")
    ingest_parser.add_argument(
        "--source-email",
        default=None,
        help="Inbox or recruiter the CVs were routed to",
    )
    ingest_parser.add_argument(
        "--provider",
        default=None,
        choices=["anthropic", "openai"],
        help="LLM provider (default: from settings)",
    )
    ingest_parser.add_argument(
        "--no-llm",
        action="store_true",
        help="Skip the LLM and use regex extraction only",
    )

    # --- shortlist subcommand (default) ---
    shortlist_parser = subparsers.add_parser("shortlist", help="Show ranked candidates")
    shortlist_parser.add_argument(
        "--view",
        default=View.BEST.value,
        choices=[v.value for v in View],
        help="best: qualified and deduplicated; all_uploads: every completed record",
    )
    rules_group = shortlist_parser.add_mutually_exclusive_group()
    rules_group.add_argument("--vertical", default=None, help="Apply a vertical's rules")
    rules_group.add_argument("--preset", default=None, help="Apply a filter preset")
    shortlist_parser.add_argument(
        "--strict",
        action="store_true",
        help="Strict vertical rules (qualifications, experience, current role)",
    )
    shortlist_parser.add_argument("--search", default="", help="Free-text search (2+ chars)")
    shortlist_parser.add_argument("--country", action="append", default=[], help="Country (repeatable, OR)")
    shortlist_parser.add_argument("--skill", action="append", default=[], help="Skill (repeatable, AND)")
    shortlist_parser.add_argument("--score-min", type=int, default=0)
    shortlist_parser.add_argument("--score-max", type=int, default=10)
    shortlist_parser.add_argument(
        "--source-email", action="append", default=[], help="Source inbox (repeatable)",
    )
    shortlist_parser.add_argument("--date-from", type=date.fromisoformat, default=None)
    shortlist_parser.add_argument("--date-to", type=date.fromisoformat, default=None)
    shortlist_parser.add_argument(
        "--export",
        choices=["json", "csv"],
        help="Export results to format (json, csv)",
    )

    # --- rules subcommand ---
    subparsers.add_parser("rules", help="List available verticals and presets")

    if argv is None:
        argv = sys.argv[1:]
    args = parser.parse_args(argv)

    # Default to shortlist when no subcommand given
    if args.command is None:
        args = parser.parse_args([*argv, "shortlist"])

    return args


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def load_settings(path: str | None) -> Settings:
    if path is None:
        return Settings()
    return Settings.from_yaml(path)


def cmd_ingest(args: argparse.Namespace, settings: Settings) -> None:
    """Handle ingest subcommand."""
    from cvtriage.extraction.analyzer import process_cv
    from cvtriage.extraction.llm import get_provider
    from cvtriage.extraction.pdf import extract_text

    provider = None
    if not args.no_llm:
        provider = get_provider(args.provider or settings.extraction.provider)

    conn = init_db(settings.database.path)
    try:
        for file in args.files:
            path = Path(file)
            text = extract_text(path)
            upload_id = insert_upload(conn, path.name, source_email=args.source_email)
            record = process_cv(conn, upload_id, text, provider, settings.extraction.model)
            name = record.candidate_name or "unnamed"
            print(f"  {path.name}: {record.processing_status.value} ({name})")
    finally:
        conn.close()


def _selection(args: argparse.Namespace) -> tuple[RuleSelection, dict[str, bool]]:
    """Build the rule selection plus the feature flags the CLI choice implies."""
    selection = RuleSelection()
    if args.preset:
        return selection.select_preset(args.preset), {"filter_presets": True}
    if args.vertical:
        return selection.select_vertical(args.vertical, strict=args.strict), {"verticals": True}
    return selection, {}


def cmd_shortlist(args: argparse.Namespace, settings: Settings) -> None:
    """Handle shortlist subcommand."""
    selection, flags = _selection(args)
    advanced = AdvancedFilters(
        search=args.search,
        countries=tuple(args.country),
        skills=tuple(args.skill),
        score_min=args.score_min,
        score_max=args.score_max,
        source_emails=tuple(args.source_email),
        date_from=args.date_from,
        date_to=args.date_to,
    )
    flags["advanced_filters"] = True
    settings = settings.model_copy(
        update={"feature_flags": settings.feature_flags.model_copy(update=flags)},
    )

    conn = init_db(settings.database.path)
    try:
        records = list_records(conn, limit=settings.database.list_limit)
    finally:
        conn.close()

    result = build_dashboard(records, View(args.view), selection, settings, advanced)

    if args.export == "json":
        print(export_json(result.candidates))
        return
    if args.export == "csv":
        print(export_csv(result.candidates), end="")
        return

    print(f"{len(result.candidates)} of {len(records)} records ({result.today_count} today)")
    for record in result.candidates:
        fields = record.extracted_fields
        email = (fields.email_address or "") if fields else ""
        print(
            f"  {record_score(record):>2}/10  {effective_date(record) or '----------'}  "
            f"{record.candidate_name or '(unnamed)'} <{email}>"
        )


def cmd_rules(settings: Settings) -> None:
    """Handle rules subcommand."""
    print("Verticals:")
    for vid in BUILT_IN_VERTICALS:
        config = vertical_config(vid, settings)
        marker = " (default)" if vid is VerticalId.DEFAULT else ""
        print(f"  {config.id}: {config.name}, min score {config.min_score}{marker}")
    print("Presets:")
    for pid in BUILT_IN_PRESETS:
        preset = preset_config(pid, settings)
        marker = " (default)" if pid is PresetId.DEFAULT else ""
        strict = "strict" if preset.is_strict else "relaxed"
        print(f"  {preset.id}: {preset.name} [{preset.vertical_id}, {strict}]{marker}")


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = load_settings(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    if args.command == "rules":
        cmd_rules(settings)
    elif args.command == "ingest":
        try:
            cmd_ingest(args, settings)
        except (FileNotFoundError, ImportError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        try:
            cmd_shortlist(args, settings)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)


if __name__ == "__main__":
    main()
