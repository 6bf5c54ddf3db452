from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import psycopg2
from dotenv import load_dotenv

from roster_sync.access.claims import TokenSet, build_claim_overrides, extract_roles
from roster_sync.access.permissions import roles_to_permissions
from roster_sync.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from roster_sync.csvfile.reader import CsvReadError, read_csv_file, read_csv_records, records_to_frame
from roster_sync.db.profile_store import PostgresImportStore
from roster_sync.importers import student_profiles, user_roles
from roster_sync.logging.init import log_summary, setup_logging
from roster_sync.models.config_models import IMPORT_KIND_USER_ROLES, ImportConfig
from roster_sync.services.collaborators import DryRunStore
from roster_sync.services.orchestrator import ProcessingError, process_all, scan_csv_files
from roster_sync.services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- Load .env (overrides the process environment) and the YAML config
- Scan the source directory for .csv files (non-recursive)
- Import every file through PostgreSQL, or through the dry-run store when
  --dry-run / DISABLE_DB_CONNECT=1 is set or the database is unreachable
- Print the SUMMARY line and exit 0 / 2 / 1
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

INSPECT_SAMPLE_ROWS = 3


def _resolve_dsn(cfg: ImportConfig) -> str:
    """Connection string, in priority order.

    1. DATABASE_URL / PGDSN from the environment (.env already applied)
    2. config ``database.dsn``
    3. PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE, each falling back
       to the matching ``database`` key and then to the libpq default
    """
    db_cfg = cfg.database
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn

    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


@contextmanager
def _db_connection(cfg: ImportConfig) -> Iterator[Any]:  # pragma: no cover (thin wrapper)
    """Yield a psycopg2 cursor. Transactions are driven by the store."""
    conn = psycopg2.connect(_resolve_dsn(cfg))
    conn.autocommit = True  # BEGIN / COMMIT are issued explicitly per file
    cur = conn.cursor()
    try:
        yield cur
    finally:
        cur.close()
        conn.close()


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env; its values win over the existing environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="CSV -> PostgreSQL roster importer")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Path to the YAML config")
    p.add_argument("--dry-run", action="store_true", help="Validate and report without touching the database")
    p.add_argument("--inspect-data", action="store_true", help="Print CSV headers & first rows then exit")
    p.add_argument("--export-csv", action="store_true", help="Also write each result artifact as CSV")
    p.add_argument("--print-template", action="store_true", help="Print the CSV template for the import kind")
    p.add_argument(
        "--explain-claims",
        type=Path,
        metavar="PATH",
        help="Print roles, permissions and claim overrides for a JSON token payload",
    )
    return p.parse_args(argv)


def _inspect_data(cfg: ImportConfig) -> int:
    try:
        csv_files = scan_csv_files(Path(cfg.source_directory))
    except ProcessingError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    if not csv_files:
        print("inspect: no .csv files")
        return EXIT_SUCCESS_ALL

    parse = user_roles.parse_user_role_csv if cfg.import_kind == IMPORT_KIND_USER_ROLES else (
        student_profiles.parse_student_profile_csv
    )
    for f in csv_files:
        print(f"FILE: {f.name}")
        try:
            text, encoding = read_csv_file(f, cfg.encodings)
            table = read_csv_records(text)
        except (OSError, CsvReadError) as e:
            print(f"  read_error: {e}")
            continue
        frame = records_to_frame(table)
        parsed = parse(text)
        print(f"  encoding={encoding} rows={len(frame)} actionable={len(parsed.actionable_rows)}")
        print(f"  columns={list(frame.columns)}")
        if not frame.empty:
            print(frame.head(INSPECT_SAMPLE_ROWS).to_string())
        for row in parsed.rows:
            for error in row.errors:
                print(f"  row {row.row_number}: {error}")
    return EXIT_SUCCESS_ALL


def _explain_claims(path: Path) -> int:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        print(f"ERROR claims: {e}")
        return EXIT_FATAL
    if not isinstance(data, dict):
        print("ERROR claims: expected a JSON object")
        return EXIT_FATAL

    if "id_token" in data or "access_token" in data:
        tokens = TokenSet.from_mapping(data)
    else:
        tokens = TokenSet(id_payload=data)
    roles = extract_roles(tokens)
    permissions = roles_to_permissions(roles)
    print(f"roles={','.join(roles)}")
    print(f"permissions={','.join(permissions)}")
    print(json.dumps(build_claim_overrides(roles), indent=2))
    return EXIT_SUCCESS_ALL


def _print_template(cfg: ImportConfig) -> int:
    if cfg.import_kind == IMPORT_KIND_USER_ROLES:
        print(user_roles.build_template_csv(), end="")
    else:
        print(student_profiles.build_template_csv(), end="")
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    # None means "read sys.argv"; an explicit [] must not pick up the test runner's args
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    logger = setup_logging(logging.DEBUG if args.debug else logging.INFO)
    logger.debug("debug mode enabled")

    if args.explain_claims is not None:
        return _explain_claims(args.explain_claims)

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.print_template:
        return _print_template(cfg)

    directory = Path(cfg.source_directory)
    if not directory.exists():
        logger.error(f"directory not found: {directory}")
        return EXIT_FATAL

    logger.info(f"Processing files from: {directory} (kind={cfg.import_kind})")

    if args.inspect_data:
        return _inspect_data(cfg)

    dry_run = args.dry_run or os.getenv("DISABLE_DB_CONNECT") == "1"
    db_mode = "dry-run"
    try:
        if dry_run:
            logger.debug("database disabled -> dry-run mode")
            result = process_all(cfg, DryRunStore(), export_csv=args.export_csv)
        else:
            try:
                with _db_connection(cfg) as cur:
                    db_mode = "live"
                    result = process_all(cfg, PostgresImportStore(cur), export_csv=args.export_csv)
            except psycopg2.Error as db_e:
                if db_mode == "live":
                    logger.error(f"database: {db_e}")
                    return EXIT_FATAL
                logger.info(f"DB connection failed -> fallback to dry-run mode: {db_e}")
                result = process_all(cfg, DryRunStore(), export_csv=args.export_csv)
    except ProcessingError as e:
        logger.error(f"processing({db_mode}): {e}")
        return EXIT_FATAL

    logger.info(f"mode={db_mode} rows={result.total_rows} written={result.success_rows}")

    total_files = result.success_files + result.failed_files
    summary_line = render_summary_line(total_files, result)
    # log_summary adds its own "SUMMARY " label
    log_summary(summary_line.removeprefix("SUMMARY "))

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
