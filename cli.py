import argparse
import json
import os
import sys
import uuid as _uuid
from pathlib import Path

from config.settings import get_settings
from db import schema
from db.connection import get_connection
from db.repos.kv_repo import SQLiteKVRepo
from errors import ColderError, InvalidRequestError
from extraction.orchestrator import build_orchestrator
from extraction.page import StaticPageSource, profile_id_for_url
from pipelines.extract_profile import extract_and_cache
from services.message_handler import build_message_handler
from services.reporting import print_extraction_summary, print_storage_usage
from storage.cache import NamespacedStore
from storage.namespaces import QuotaDomain
from storage.service import StorageService
from utils.logging_setup import init_logging


def _storage(args) -> StorageService:
    settings = get_settings()
    conn = get_connection(args.db)
    schema.bootstrap(conn)
    store = NamespacedStore(
        SQLiteKVRepo(conn),
        capacities={
            QuotaDomain.SYNC: settings.sync_quota_bytes,
            QuotaDomain.LOCAL: settings.local_quota_bytes,
        },
    )
    return StorageService(store)


def cmd_bootstrap(args):
    conn = get_connection(args.db)
    schema.bootstrap(conn)
    print("Schema ready")


def cmd_extract(args):
    if not os.getenv("RUN_ID"):
        os.environ["RUN_ID"] = _uuid.uuid4().hex
    storage = _storage(args)
    source = StaticPageSource(args.url, path=args.html)
    overrides = {}
    if args.max_attempts is not None:
        overrides["max_attempts"] = args.max_attempts

    ctx = extract_and_cache(
        source,
        storage,
        use_cache=not args.no_cache,
        orchestrator_factory=lambda src: build_orchestrator(src, **overrides),
    )
    profile = ctx.profile
    if args.json:
        print(json.dumps(profile.to_wire(), indent=2, ensure_ascii=False))
        return
    print_extraction_summary(profile, ctx.meta, cached=ctx.cached)


def cmd_show_profile(args):
    storage = _storage(args)
    profile = storage.get_target_profile_by_url(args.url)
    if profile is None:
        print("No cached profile")
        return
    print(json.dumps(profile.to_wire(), indent=2, ensure_ascii=False))


def cmd_history(args):
    storage = _storage(args)
    out = [e.to_wire() for e in storage.get_outreach_history()]
    print(json.dumps(out, indent=2, ensure_ascii=False))


def cmd_usage(args):
    storage = _storage(args)
    print_storage_usage(storage.get_storage_usage())


def cmd_sweep(args):
    storage = _storage(args)
    counts = storage.sweep()
    for namespace, removed in counts.items():
        print(f"{namespace}: {removed}")
    print(f"Swept {sum(counts.values())} expired records")


def cmd_forget(args):
    storage = _storage(args)
    removed = storage.forget_profile(profile_id_for_url(args.url))
    print(f"Removed {removed} records")


def cmd_clear_all(args):
    storage = _storage(args)
    removed = storage.clear_all_data(args.confirm)
    print(f"Cleared {removed} records")


def cmd_serve(args):
    storage = _storage(args)
    handler = build_message_handler(storage)
    handler.start()
    try:
        for line in sys.stdin:
            line = line.strip()
            if not line:
                continue
            try:
                message = json.loads(line)
            except json.JSONDecodeError as e:
                response = {"success": False, "error": {"code": InvalidRequestError.code, "message": f"Invalid JSON: {e}"}}
            else:
                response = handler.handle(message)
            print(json.dumps(response, ensure_ascii=False), flush=True)
    finally:
        handler.stop()


def main():
    settings = get_settings()
    init_logging(settings.log_level)
    parser = argparse.ArgumentParser(description="Profile extraction and cache CLI")
    parser.add_argument("--db", default=settings.db_path, help="Path to SQLite DB (default from settings)")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_boot = sub.add_parser("bootstrap", help="Create tables and indexes")
    p_boot.set_defaults(func=cmd_bootstrap)

    p_ext = sub.add_parser("extract", help="Extract a profile from a saved page and cache it")
    p_ext.add_argument("--html", required=True, help="Path to the saved profile page HTML")
    p_ext.add_argument("--url", required=True, help="URL the page was saved from")
    p_ext.add_argument("--max-attempts", type=int, default=None, help="Override EXTRACT_MAX_ATTEMPTS")
    p_ext.add_argument("--no-cache", action="store_true", help="Ignore a cached profile and extract again")
    p_ext.add_argument("--json", action="store_true", help="Print the profile as JSON")
    p_ext.set_defaults(func=cmd_extract)

    p_show = sub.add_parser("show-profile", help="Show the cached profile for a URL")
    p_show.add_argument("--url", required=True, help="LinkedIn profile URL")
    p_show.set_defaults(func=cmd_show_profile)

    p_hist = sub.add_parser("history", help="List live outreach history")
    p_hist.set_defaults(func=cmd_history)

    p_use = sub.add_parser("usage", help="Show quota usage for both storage domains")
    p_use.set_defaults(func=cmd_usage)

    p_sw = sub.add_parser("sweep", help="Remove expired records from every namespace")
    p_sw.set_defaults(func=cmd_sweep)

    p_fg = sub.add_parser("forget", help="Delete everything stored about one profile")
    p_fg.add_argument("--url", required=True, help="LinkedIn profile URL")
    p_fg.set_defaults(func=cmd_forget)

    p_clr = sub.add_parser("clear-all", help="Delete all stored data")
    p_clr.add_argument("--confirm", required=True, help="Must be CONFIRM_DELETE_ALL")
    p_clr.set_defaults(func=cmd_clear_all)

    p_srv = sub.add_parser("serve", help="Answer JSON-lines requests on stdin while sweeping expired records in the background")
    p_srv.set_defaults(func=cmd_serve)

    args = parser.parse_args()
    try:
        args.func(args)
    except ColderError as e:
        print(f"Error [{e.code}]: {e.message}")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
