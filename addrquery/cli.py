"""CLI entrypoint for address lookup queries over a GeoJSON-lines dataset."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from addrquery.common.config_loader import ConfigBundle, load_all_configs
from addrquery.common.constants import COMMANDS, EXIT_HARD_FAIL, EXIT_REQUEST_ERROR, EXIT_SUCCESS
from addrquery.common.errors import QueryError, ValidationError
from addrquery.common.logging import build_logger, log_event
from addrquery.query.filters import FilterInput
from addrquery.query.service import (
    AddressQueryService,
    ContainmentRequest,
    ProximityRequest,
    SearchRequest,
)
from addrquery.store.memory import InMemoryAddressStore


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("command", choices=COMMANDS)
    parser.add_argument("--dataset", required=True, help="GeoJSON Feature per line")
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--log-file", default=None)
    parser.add_argument("--query", default=None)
    parser.add_argument("--wkt", default=None)
    parser.add_argument("--limit", type=int, default=None)
    parser.add_argument("--batch-size", type=int, default=None)
    parser.add_argument("--cursor", default=None)
    parser.add_argument("--point", nargs=2, metavar=("LON", "LAT"), default=None)
    parser.add_argument("--max-distance", default=None)
    parser.add_argument("--city", action="append", default=None)
    parser.add_argument("--street", action="append", default=None)
    parser.add_argument("--postcode", action="append", default=None)
    parser.add_argument("--district", action="append", default=None)
    parser.add_argument("--region", action="append", default=None)
    parser.add_argument("--number", default=None)
    parser.add_argument("--top", type=int, default=10)
    return parser.parse_args(argv)


def _load_bundle(args: argparse.Namespace) -> ConfigBundle:
    config_dir = Path(args.config_dir)
    overlay_config_dir = Path(args.overlay_config_dir) if args.overlay_config_dir else None
    if not config_dir.exists():
        return ConfigBundle()
    return load_all_configs(config_dir, overlay_config_dir=overlay_config_dir)


def _filters_from_args(args: argparse.Namespace) -> FilterInput:
    return FilterInput(
        city=args.city,
        street=args.street,
        postcode=args.postcode,
        district=args.district,
        region=args.region,
        number=args.number,
    )


def execute_command(args: argparse.Namespace, service: AddressQueryService, store: InMemoryAddressStore) -> dict:
    if args.command == "search":
        return service.search(SearchRequest(query=args.query, limit=args.limit)).to_dict()
    if args.command == "within":
        if not args.wkt:
            raise ValidationError("--wkt is required for within")
        request = ContainmentRequest(
            region_wkt=args.wkt,
            limit=args.limit,
            batch_size=args.batch_size,
            cursor=args.cursor,
            filters=_filters_from_args(args),
        )
        return service.within_region(request).to_dict()
    if args.command == "near":
        request = ProximityRequest(
            point=args.point,
            max_distance=args.max_distance,
            filters=_filters_from_args(args),
        )
        return service.near_point(request).to_dict()
    if args.command == "stats":
        return store.summary(top=args.top)
    raise ValueError(f"Unknown command: {args.command}")


def run_command(args: argparse.Namespace, out=None) -> int:
    out = out or sys.stdout
    logger = build_logger(level=args.log_level, log_path=Path(args.log_file) if args.log_file else None)
    bundle = _load_bundle(args)
    store = InMemoryAddressStore.from_jsonl(Path(args.dataset))
    log_event(logger, "dataset loaded", event="DATASET_LOADED", status="ok", rows_in=len(store))

    service = AddressQueryService(store, ranking=bundle.ranking, defaults=bundle.defaults)
    try:
        payload = execute_command(args, service, store)
    except ValidationError as exc:
        log_event(logger, str(exc), event="COMMAND_FAIL", status="error", error_code=exc.error_code)
        return EXIT_REQUEST_ERROR

    json.dump(payload, out, ensure_ascii=False)
    out.write("\n")
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    try:
        return run_command(args)
    except (QueryError, OSError, ValueError) as exc:
        print(f"addrquery: {exc}", file=sys.stderr)
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
