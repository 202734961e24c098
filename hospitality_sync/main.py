"""Command-line entry point: print a front desk or housekeeping view as JSON."""

import argparse
import asyncio
import json
import sys
from typing import Any, Optional

from hospitality_sync.config import configure_logging, get_logger, settings
from hospitality_sync.projectors import ALL_FLOORS, FrontDeskTab, TaskScope
from hospitality_sync.screens import BaseScreen, FrontDeskScreen, HousekeepingScreen
from hospitality_sync.services import SnapshotFilters

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_ERRORS = 1
EXIT_SESSION_EXPIRED = 2


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="hospitality-sync",
        description="Load an operational snapshot and print the projected view as JSON.",
    )
    parser.add_argument("screen", choices=["front-desk", "housekeeping"])
    parser.add_argument(
        "--tab",
        choices=[t.value for t in FrontDeskTab],
        default=FrontDeskTab.ARRIVALS.value,
        help="Front desk tab",
    )
    parser.add_argument(
        "--scope",
        choices=[s.value for s in TaskScope],
        default=TaskScope.ALL_TASKS.value,
        help="Housekeeping task scope",
    )
    parser.add_argument("--floor", default=ALL_FLOORS, help="Housekeeping floor filter")
    parser.add_argument("--branch", default=None, help="Branch id (defaults to BRANCH_ID)")
    parser.add_argument("--watch", action="store_true", help="Keep polling and print every refresh")
    return parser.parse_args(argv)


def build_screen(args: argparse.Namespace) -> BaseScreen:
    filters = SnapshotFilters(branch_id=args.branch or settings.branch_id)
    if args.screen == "front-desk":
        return FrontDeskScreen(filters=filters, tab=FrontDeskTab(args.tab))
    return HousekeepingScreen(filters=filters, scope=TaskScope(args.scope), floor=args.floor)


def render(screen: BaseScreen) -> dict[str, Any]:
    """JSON-ready payload for the screen's current view."""
    return {
        "screen": screen.name,
        "session_expired": screen.session_expired,
        "snapshot": screen.snapshot.get_results() if screen.snapshot else None,
        "view": screen.view.model_dump(mode="json") if screen.view is not None else None,
    }


def emit(screen: BaseScreen) -> None:
    print(json.dumps(render(screen), indent=2, default=str), flush=True)


def exit_code(screen: BaseScreen) -> int:
    if screen.session_expired:
        return EXIT_SESSION_EXPIRED
    if screen.snapshot is None or screen.snapshot.has_errors():
        return EXIT_ERRORS
    return EXIT_OK


async def main(argv: Optional[list[str]] = None) -> int:
    """Load one snapshot (or poll until interrupted) and print the view.

    Returns:
        0 when the last snapshot had no errors, 1 otherwise, 2 on session expiry
    """
    args = parse_args(argv)
    logger.info(
        "Starting hospitality sync",
        environment=settings.environment,
        screen=args.screen,
        watch=args.watch,
    )

    missing = settings.validate_api()
    if missing:
        logger.error("API configuration incomplete", missing=missing)
        print(json.dumps({"success": False, "error": f"Missing: {', '.join(missing)}"}))
        return EXIT_ERRORS

    screen = build_screen(args)
    try:
        if not args.watch:
            async with screen:
                emit(screen)
            return exit_code(screen)

        expired = asyncio.Event()
        screen.on_session_expired = expired.set
        async with screen:
            emit(screen)
            screen.on_view = lambda _view: emit(screen)
            if not screen.session_expired:
                await expired.wait()
        return exit_code(screen)
    except Exception as e:
        logger.error(
            "Fatal error in main application",
            error=str(e),
            exc_info=True,
        )
        return EXIT_ERRORS


def run_sync(argv: Optional[list[str]] = None) -> int:
    """Run the async main function synchronously.

    Returns:
        Exit code from main()
    """
    configure_logging()
    try:
        return asyncio.run(main(argv))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return EXIT_OK


if __name__ == "__main__":
    sys.exit(run_sync())
