from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def _ensure_backend_on_path() -> None:
    backend_dir = Path(__file__).resolve().parents[1]
    if str(backend_dir) not in sys.path:
        sys.path.insert(0, str(backend_dir))


def _print_json(payload) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def _open_session(args):
    from common.report_engine.session import ReportSession
    from connectors.storage.config import get_app_config, open_store

    config = get_app_config()
    for warning in config.validate_config():
        logger.warning("Config %s: %s", warning.field, warning.message)
    store = open_store(config, Path(args.store) if args.store else None)
    return ReportSession(store, config=config)


def cmd_check(args) -> int:
    session = _open_session(args)
    result = session.check_integrity()
    _print_json(result.model_dump(mode="json"))
    return 0 if result.is_valid else 1


def cmd_repair(args) -> int:
    session = _open_session(args)
    _print_json(session.repair().model_dump())
    return 0


def cmd_export(args) -> int:
    session = _open_session(args)
    text = session.export_bundle()
    if args.out:
        Path(args.out).write_text(text, encoding="utf-8")
    else:
        print(text)
    return 0


def cmd_import(args) -> int:
    session = _open_session(args)
    result = session.import_bundle(Path(args.bundle).read_text(encoding="utf-8"))
    _print_json(result.model_dump())
    return 0 if result.success else 1


def cmd_usage(args) -> int:
    session = _open_session(args)
    usage = session.storage_usage().model_dump()
    usage["near_quota"] = session.is_near_quota()
    _print_json(usage)
    return 0


def cmd_render(args) -> int:
    session = _open_session(args)
    startup = session.startup()
    if startup.repair is not None:
        for action in startup.repair.actions:
            logger.info("Repair: %s", action)
    errors = session.validate_report()
    if errors and not args.force:
        _print_json([e.model_dump(mode="json") for e in errors])
        return 1
    document = session.generate_document()
    if args.out:
        Path(args.out).write_text(document, encoding="utf-8")
    else:
        print(document, end="")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Maintain the report assist store and render reports.")
    parser.add_argument("--store", help="Path to the JSON store file (default: REPORT_ASSIST_STORE_PATH).")
    parser.add_argument("--verbose", action="store_true", help="Enable INFO logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("check", help="Validate stored records.").set_defaults(func=cmd_check)
    sub.add_parser("repair", help="Drop or remove invalid stored records.").set_defaults(func=cmd_repair)

    export = sub.add_parser("export", help="Export all records as a bundle.")
    export.add_argument("--out", help="Write the bundle to this file instead of stdout.")
    export.set_defaults(func=cmd_export)

    imp = sub.add_parser("import", help="Import a bundle file.")
    imp.add_argument("bundle", help="Bundle file to import.")
    imp.set_defaults(func=cmd_import)

    sub.add_parser("usage", help="Show estimated storage usage.").set_defaults(func=cmd_usage)

    render = sub.add_parser("render", help="Render the stored report as markdown.")
    render.add_argument("--out", help="Write the document to this file instead of stdout.")
    render.add_argument("--force", action="store_true", help="Render even when the report has validation errors.")
    render.set_defaults(func=cmd_render)
    return parser


def main(argv: list[str] | None = None) -> int:
    _ensure_backend_on_path()
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
