"""CLI entry point for the recruitment notice drafting agent."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from src.core.config import Settings
from src.core.db import count_posts, init_db
from src.core.repository import ContentRepository
from src.core.schemas import RunSummary
from src.pipeline.assembly import assemble_agent, assemble_title_agent
from src.pipeline.categories import seed_default_categories
from src.pipeline.orchestrator import export_run_json
from src.pipeline.scheduler import build_scheduler
from src.pipeline.title_agent import persist_title_draft
from src.web.session import HttpSession


# Run flags are accepted before or after the subcommand. Parsers leave unset
# flags out of the namespace; these defaults are applied afterwards.
_FLAG_DEFAULTS: dict[str, object] = {
    "config": "config/settings.yaml",
    "verbose": False,
    "dry_run": False,
    "auto_publish": False,
    "export": None,
}


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=argparse.SUPPRESS,
        help="Path to settings YAML file (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Enable verbose (DEBUG) logging",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Recruitment notice agent - discover, verify and draft notice posts",
    )
    subparsers = parser.add_subparsers(dest="command")

    # --- run subcommand (default) ---
    run_parser = subparsers.add_parser("run", help="Run the pipeline once")
    _add_common_args(run_parser)
    run_parser.add_argument(
        "--dry-run",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Run every stage but do not save anything",
    )
    run_parser.add_argument(
        "--auto-publish",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Allow drafts that pass both thresholds to be published",
    )
    run_parser.add_argument(
        "--export",
        choices=["json"],
        default=argparse.SUPPRESS,
        help="Export run outcomes to format (json)",
    )

    # --- schedule subcommand ---
    schedule_parser = subparsers.add_parser(
        "schedule",
        help="Stay in the foreground and run the pipeline daily at the configured time",
    )
    _add_common_args(schedule_parser)

    # --- draft-from-title subcommand ---
    title_parser = subparsers.add_parser(
        "draft-from-title",
        help="Draft a post from a notice title (and optional raw notice text)",
    )
    _add_common_args(title_parser)
    title_parser.add_argument("--title", required=True, help="Notice title")
    title_parser.add_argument(
        "--text-file",
        help="Path to a text file with the raw notice content",
    )
    title_parser.add_argument(
        "--no-save",
        action="store_true",
        help="Print the draft as JSON instead of saving it",
    )

    # --- seed-categories subcommand ---
    seed_parser = subparsers.add_parser(
        "seed-categories",
        help="Create the default category catalog",
    )
    _add_common_args(seed_parser)

    # --- top-level flags for run ---
    parser.add_argument("--config", default=argparse.SUPPRESS, help=argparse.SUPPRESS)
    parser.add_argument(
        "--dry-run", action="store_true", default=argparse.SUPPRESS, help=argparse.SUPPRESS,
    )
    parser.add_argument(
        "--auto-publish", action="store_true", default=argparse.SUPPRESS, help=argparse.SUPPRESS,
    )
    parser.add_argument(
        "--export", choices=["json"], default=argparse.SUPPRESS, help=argparse.SUPPRESS,
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", default=argparse.SUPPRESS, help=argparse.SUPPRESS,
    )

    args = parser.parse_args(argv)

    # Default to run when no subcommand given
    if args.command is None:
        args.command = "run"
    for name, value in _FLAG_DEFAULTS.items():
        if not hasattr(args, name):
            setattr(args, name, value)

    return args


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def load_settings(args: argparse.Namespace) -> Settings:
    """Load YAML settings and apply CLI overrides."""
    settings = Settings.from_yaml(args.config)
    if getattr(args, "dry_run", False):
        settings.automation.dry_run = True
    if getattr(args, "auto_publish", False):
        settings.automation.auto_publish = True
    return settings


def open_repository(settings: Settings) -> ContentRepository:
    path = settings.database.path
    return ContentRepository(init_db(path), path=path)


def print_summary(summary: RunSummary) -> None:
    prefix = "[DRY RUN] " if summary.dry_run else ""
    if summary.aborted:
        print(f"\n{prefix}Run aborted: {summary.error}")
    print(
        f"\n{prefix}Run complete: {summary.discovered} discovered, "
        f"{summary.unverified} unverified, {summary.saved} saved "
        f"({summary.published} published), {summary.duplicates} duplicates, "
        f"{summary.failed} failed.",
    )
    for o in summary.outcomes:
        if o.slug:
            status = o.status.value if o.status else "-"
            print(f"  {o.action:<10} {o.slug} [{status}]")


async def run(settings: Settings, export_format: str | None) -> RunSummary | None:
    """Run the full pipeline once."""
    repo = open_repository(settings)
    try:
        async with HttpSession(settings.http) as session:
            agent = assemble_agent(settings, repo, session)
            summary = await agent.run()
    finally:
        repo.conn.close()

    if summary is None:
        return None

    print_summary(summary)
    if export_format == "json":
        print(f"\n{export_run_json(summary)}")
    return summary


async def serve(settings: Settings) -> None:
    """Keep a scheduler alive that triggers one run per day."""
    repo = open_repository(settings)
    async with HttpSession(settings.http) as session:
        agent = assemble_agent(settings, repo, session)
        scheduler = build_scheduler(agent.run, settings.schedule)
        scheduler.start()
        print(
            f"Daily agent scheduled for {settings.schedule.hour:02d}:"
            f"{settings.schedule.minute:02d}. Press Ctrl+C to stop.",
        )
        try:
            await asyncio.Event().wait()
        finally:
            scheduler.shutdown(wait=False)
            repo.conn.close()


async def draft_from_title(
    settings: Settings,
    title: str,
    source_text: str | None,
    save: bool,
) -> None:
    agent = assemble_title_agent(settings)
    result = await agent.create(title, source_text)
    draft = result.draft

    print(f"Drafting finished after {len(result.attempts)} attempt(s): {result.state.value}")
    for issue in draft.automation_details.issues:
        print(f"  issue: {issue}")

    if not save:
        print(json.dumps(draft.to_document(), indent=2))
        return

    repo = open_repository(settings)
    try:
        stored = persist_title_draft(repo, draft)
    finally:
        repo.conn.close()
    if stored is None:
        print("Draft not saved (slug collision), try again.")
    else:
        print(f"Draft saved as '{stored.slug}'")


def cmd_seed_categories(settings: Settings) -> None:
    """Handle seed-categories subcommand."""
    repo = open_repository(settings)
    try:
        created = seed_default_categories(repo)
        total = len(repo.list_categories())
        posts = count_posts(repo.conn)
    finally:
        repo.conn.close()
    print(f"Created {created} categories ({total} in catalog, {posts} posts stored).")


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = load_settings(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    if args.command == "seed-categories":
        cmd_seed_categories(settings)
    elif args.command == "schedule":
        try:
            asyncio.run(serve(settings))
        except KeyboardInterrupt:
            print("Scheduler stopped.")
    elif args.command == "draft-from-title":
        try:
            source_text = Path(args.text_file).read_text() if args.text_file else None
            asyncio.run(draft_from_title(settings, args.title, source_text, not args.no_save))
        except (FileNotFoundError, ImportError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        # run (default)
        try:
            summary = asyncio.run(run(settings, args.export))
        except (ImportError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        if summary is not None and summary.aborted:
            sys.exit(1)


if __name__ == "__main__":
    main()
