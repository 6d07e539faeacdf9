"""
Catalyst Watch - Main application entry point.

Runs the periodic catalyst revisit scan and serves the analysis API.

Flags:
    -scan-once        run a single forced scan tick, print the report and exit
    -seed <file.json> load watchlists, alert settings and catalysts, then exit
"""

import json
import sys

import uvicorn
from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from catalyst_watch.config.logging import get_logger
from catalyst_watch.config.settings import get_settings
from catalyst_watch.events import ScanAuditHandler, get_event_bus
from catalyst_watch.scheduler import (
    add_revisit_scan_job,
    list_scheduled_jobs,
    shutdown_scheduler,
    start_scheduler,
)
from catalyst_watch.utils.config import (
    initialize_application,
    missing_env_vars_message,
    validate_environment,
)


def scan_once() -> None:
    """Run one forced scan tick and print its report."""
    from catalyst_watch.services.scan.jobs import run_revisit_scan_sync

    ScanAuditHandler().register(get_event_bus())
    report = run_revisit_scan_sync(force=True)
    print(json.dumps(report.to_dict(), indent=2))


def seed(path: str) -> None:
    """Load reference data from a JSON file."""
    from catalyst_watch.ormdb.seed import seed_from_file

    counts = seed_from_file(path)
    print(f"Seeded {counts['watchlist']} watchlist entries, "
          f"{counts['settings']} settings, {counts['catalysts']} catalysts "
          f"({counts['watchlist_removed']} watchlist entries removed)")


def main() -> None:
    """Main application entry point."""
    initialize_application()

    logger = get_logger(__name__)
    logger.info("Starting Catalyst Watch")

    settings = get_settings()

    if "-seed" in sys.argv:
        try:
            path = sys.argv[sys.argv.index("-seed") + 1]
        except IndexError:
            print("Error: Please provide a JSON file after the -seed flag.")
            sys.exit(1)
        seed(path)
        return

    if "-scan-once" in sys.argv:
        scan_once()
        return

    if not validate_environment():
        logger.error("Environment validation failed")
        print("Please set the required environment variables before running the application.")
        print(missing_env_vars_message())
        sys.exit(1)

    logger.info(
        "Starting production mode",
        interval_minutes=settings.scan_interval_minutes,
        host=settings.endpoint_host,
        port=settings.endpoint_port,
    )

    start_scheduler()
    add_revisit_scan_job(settings.scan_interval_minutes)
    list_scheduled_jobs()

    try:
        uvicorn.run(
            "catalyst_watch.webapi.app:app",
            host=settings.endpoint_host,
            port=settings.endpoint_port,
            reload=settings.api_reload,
            log_level=settings.api_log_level.lower(),
        )
    except KeyboardInterrupt:
        logger.info("Received interrupt signal")
        print("\nShutting down...")
    finally:
        logger.info("Shutting down scheduler")
        shutdown_scheduler()


if __name__ == "__main__":
    main()
