"""
Command line entry point: scrape one query, store it in SQLite and export.
"""
import argparse
import asyncio
import os

from .core import DEFAULT_USER_AGENT, run_scrape
from .database import db_connect, db_init, upsert_places
from .export import export_new_since_run, save_frame, save_output_rows
from .utils import init_logger, now_iso


def parse_args(argv=None):
    ap = argparse.ArgumentParser(description="Google Maps places scraper with SQLite upserts")
    ap.add_argument("--query", type=str, required=True, help="Search query, e.g. 'coffee shop London'")
    ap.add_argument("--limit", type=int, default=20, help="Maximum places to collect (1-1000)")
    ap.add_argument("--headed", action="store_true", help="Show the browser window")
    ap.add_argument("--user-agent", type=str, default=os.getenv("USER_AGENT", DEFAULT_USER_AGENT),
                    help="User agent sent by the browser")
    ap.add_argument("--db", type=str, default=os.getenv("GMAPS_DB", "gmaps_scraper.db"), help="Path to SQLite DB")
    ap.add_argument("--out", type=str, default="scraped_results.csv", help="CSV/XLSX file to export")
    ap.add_argument("--export-new", action="store_true", help="Export only places first seen during this run")
    # Logging
    lvl_choices = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    ap.add_argument("--log-level", choices=lvl_choices, default=None,
                    help="Global log level for both console and file (overrides --log-console/--log-file).")
    ap.add_argument("--log-console", choices=lvl_choices, default=os.getenv("LOG_CONSOLE", "INFO"),
                    help="Console log level (default from env LOG_CONSOLE or INFO).")
    ap.add_argument("--log-file", choices=lvl_choices, default=os.getenv("LOG_FILE", "DEBUG"),
                    help="File log level (default from env LOG_FILE or DEBUG).")
    ap.add_argument("--log-file-path", default=os.getenv("LOG_FILE_PATH", "gmaps.log"),
                    help="Path to log file (default from env LOG_FILE_PATH or gmaps.log).")
    ap.add_argument("--no-file-log", action="store_true", help="Disable file logging (only console output).")
    return ap.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    eff_console = args.log_level or args.log_console
    eff_file = args.log_level or args.log_file
    logger = init_logger(
        console_level=eff_console,
        file_level=eff_file,
        log_file=None if args.no_file_log else args.log_file_path
    )
    limit = max(1, min(1000, args.limit))
    run_started_iso = now_iso()
    logger.info(f">>> Run started at {run_started_iso}: query='{args.query}', limit={limit}")

    records = asyncio.run(run_scrape(
        query=args.query,
        limit=limit,
        headless=not args.headed,
        user_agent=args.user_agent,
        logger=logger,
    ))

    os.makedirs(os.path.dirname(args.db) or ".", exist_ok=True)
    conn = db_connect(args.db)
    try:
        db_init(conn)
        new_places, updated_places = upsert_places(conn, records)
        logger.info(f">>> In DB: new places: {new_places}, updated: {updated_places}")

        if args.export_new:
            dfn = export_new_since_run(conn, run_started_iso)
            save_frame(dfn, args.out)
            logger.info(f">>> Export only new places: {len(dfn)} rows -> {args.out}")
        else:
            save_output_rows(records, args.out, logger=logger)
    finally:
        conn.close()


if __name__ == "__main__":
    main()
