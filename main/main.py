from __future__ import annotations

import argparse
import json
import logging
import sys

import pandas as pd

from brand_copy.brands import DEFAULT_REGISTRY
from brand_copy.config import DEFAULT_CONFIG, CopyEngineConfig
from brand_copy.errors import BatchCopyError, StaleRevisionError
from brand_copy.service import BrandCopyService


LIST_COLUMNS = {
    "queries": ["id", "name", "brand", "category", "region", "createdAt", "createdBy"],
    "insights": ["id", "title", "brandName", "region", "yearMonth", "createdAt", "createdBy"],
}


def parse_date_rule(value: str) -> dict[str, str]:
    if ":" not in value:
        raise argparse.ArgumentTypeError(f"Date rule must look like FROM:TO, got {value!r}")
    old, new = value.split(":", 1)
    if not old or not new:
        raise argparse.ArgumentTypeError(f"Date rule needs both sides, got {value!r}")
    return {"from": old, "to": new}


def add_copy_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--source", required=True, help="Source brand code")
    parser.add_argument("--target", action="append", default=[], help="Target brand code (repeatable)")
    parser.add_argument("--date", action="append", default=[], type=parse_date_rule, help="Date rule FROM:TO")
    parser.add_argument("--id", action="append", default=[], dest="source_ids", help="Only copy these record ids")
    parser.add_argument("--region", default=None)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Brand batch copy for saved queries and insights")
    parser.add_argument("--db-path", default=DEFAULT_CONFIG.db_path, help="SQLite database path")
    parser.add_argument("--log-level", default=DEFAULT_CONFIG.log_level)

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("brands", help="List registered brand codes")

    listing = subparsers.add_parser("list", help="Show saved queries or insights")
    listing.add_argument("--kind", choices=["queries", "insights"], default="queries")
    listing.add_argument("--include-deleted", action="store_true")

    preview = subparsers.add_parser("rewrite-sql", help="Preview a SQL rewrite without saving")
    preview.add_argument("--sql", required=True)
    preview.add_argument("--source", required=True)
    preview.add_argument("--target", required=True)
    preview.add_argument("--date", action="append", default=[], type=parse_date_rule)

    copy_queries = subparsers.add_parser("copy-queries", help="Copy saved queries to other brands")
    add_copy_arguments(copy_queries)

    copy_insights = subparsers.add_parser("copy-insights", help="Copy saved insights to other brands")
    add_copy_arguments(copy_insights)

    match = subparsers.add_parser("match-prompt", help="Find the analysis request saved for a title")
    match.add_argument("--name", required=True)

    return parser


def build_request(args: argparse.Namespace) -> dict:
    request = {
        "sourceBrandCode": args.source,
        "targetBrandCodes": args.target,
        "dateReplacements": args.date,
    }
    if args.source_ids:
        request["sourceIds"] = args.source_ids
    if args.region:
        request["region"] = args.region
    return request


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.command == "brands":
        for option in DEFAULT_REGISTRY.options():
            default = " (default)" if option["code"] == DEFAULT_REGISTRY.default_code else ""
            print(f"{option['code']:<3} {option['name']}{default}")
        return 0

    config = CopyEngineConfig(db_path=args.db_path, log_level=args.log_level)
    service = BrandCopyService(config)

    if args.command == "list":
        records = service.list_records(args.kind, include_deleted=args.include_deleted)
        if not records:
            print("No saved records.")
            return 0
        frame = pd.DataFrame(records).reindex(columns=LIST_COLUMNS[args.kind])
        print(frame.fillna("").to_string(index=False))
        return 0

    if args.command == "rewrite-sql":
        try:
            print(service.preview_sql(args.sql, args.source, args.target, args.date))
        except BatchCopyError as exc:
            print(exc.message, file=sys.stderr)
            return 1
        return 0

    if args.command in {"copy-queries", "copy-insights"}:
        request = build_request(args)
        try:
            if args.command == "copy-queries":
                response = service.copy_queries(request)
            else:
                response = service.copy_insights(request)
        except StaleRevisionError as exc:
            print(str(exc), file=sys.stderr)
            return 1
        if not response.get("success"):
            print(response.get("error"), file=sys.stderr)
            return 1
        print(response["message"])
        print(json.dumps({"createdIds": response["createdIds"], "metrics": response["metrics"]}, indent=2))
        return 0

    if args.command == "match-prompt":
        matched = service.suggest_analysis_request(args.name)
        print(matched if matched else "No matching analysis request.")
        return 0

    return 1


if __name__ == "__main__":
    sys.exit(main())
