"""Review Insights -- CLI entry point."""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from review_insights.config import load_config, load_supabase_settings
from review_insights.errors import ConfigError, NotFoundError, UpstreamFetchError

DEFAULT_CACHE = project_root / "data" / "cache" / "snapshot.json"


def _load_engine(args):
    from review_insights.collectors import load_snapshot
    from review_insights.engine import InsightsEngine

    snapshot = load_snapshot(args.snapshot)
    if snapshot is None:
        print(f"ERROR: No snapshot at {args.snapshot}. Run 'collect' first.")
        sys.exit(1)

    print(f"Loaded {len(snapshot.reviews)} reviews from {args.snapshot}.")
    return InsightsEngine(snapshot, load_config(project_root / ".env"))


def cmd_collect(args):
    """Fetch a full snapshot from Supabase into the cache."""
    from review_insights.collectors import SupabaseCollector, save_snapshot

    try:
        settings = load_supabase_settings(project_root / ".env")
    except ConfigError as e:
        print(f"ERROR: {e}")
        print("Add SUPABASE_URL and SUPABASE_KEY to your .env file.")
        sys.exit(1)

    collector = SupabaseCollector(settings)
    try:
        snapshot = collector.collect_snapshot()
    except UpstreamFetchError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    save_snapshot(snapshot, args.snapshot)

    print("\nCollection complete:")
    print(f"  Participants: {len(snapshot.participants)}")
    print(f"  Songs: {len(snapshot.songs)}")
    print(f"  Reviews: {len(snapshot.reviews)}")
    print(f"  Cached to: {args.snapshot}")


def cmd_analyze(args):
    """Compute every insight card for one participant."""
    from review_insights.reporter import export_insights_json, format_summary

    engine = _load_engine(args)
    try:
        results = engine.run_all(args.participant)
    except NotFoundError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    print()
    print(format_summary(results))

    if args.out:
        export_insights_json(results, args.out)


def cmd_card(args):
    """Print a single card as JSON."""
    engine = _load_engine(args)
    methods = {
        "twin": engine.get_taste_twin,
        "hot-takes": engine.get_hot_take_index,
        "cadence": engine.get_cadence_archetype,
        "era": engine.get_era_bias,
        "themes": engine.get_theme_affinities,
    }
    try:
        if args.command == "cohort":
            result = engine.get_cohort_percentile(args.participant, args.dimension)
        else:
            result = methods[args.command](args.participant)
    except NotFoundError as e:
        print(f"Not found: {e.reason}")
        sys.exit(1)

    print(json.dumps(result, indent=2, ensure_ascii=False, default=str))


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Review Insights -- personal analytics for the music review project"
    )
    parser.add_argument("--snapshot", default=str(DEFAULT_CACHE), help="Snapshot cache path")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # collect
    subparsers.add_parser("collect", help="Fetch participants, songs and reviews from Supabase")

    # analyze
    analyze_p = subparsers.add_parser("analyze", help="Compute all cards for a participant")
    analyze_p.add_argument("--participant", required=True, help="Participant id (email)")
    analyze_p.add_argument("--out", help="Optional JSON output path")

    # single cards
    for name, help_text in [
        ("twin", "Taste twin"),
        ("hot-takes", "Hot take index"),
        ("cadence", "Cadence archetype"),
        ("era", "Era bias"),
        ("themes", "Theme affinities"),
    ]:
        card_p = subparsers.add_parser(name, help=help_text)
        card_p.add_argument("--participant", required=True, help="Participant id (email)")

    # cohort
    cohort_p = subparsers.add_parser("cohort", help="Cohort percentile for one dimension")
    cohort_p.add_argument("--participant", required=True, help="Participant id (email)")
    cohort_p.add_argument("--dimension", required=True, help="Cohort field, e.g. city or gender")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "collect":
        cmd_collect(args)
    elif args.command == "analyze":
        cmd_analyze(args)
    elif args.command in ("twin", "hot-takes", "cadence", "era", "themes", "cohort"):
        cmd_card(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
