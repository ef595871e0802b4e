from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from .config import build_config_from_env
from .errors import ValveLookupError
from .report import build_valve_table, format_search_summary, write_search_workbook
from .service import ValveLookupService


def setup_logging(verbose: bool) -> None:
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Look up valves, zones and lots in the valve network.")
    parser.add_argument(
        "--workbook",
        type=str,
        default=None,
        help="Path to the valve workbook (default: $VALVE_WORKBOOK_PATH or data/Master Zone & Valve Database.xlsx)",
    )
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    parser.add_argument("--verbose", action="store_true", help="Enable INFO logs")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("valves", help="List every valve")

    p_valve = sub.add_parser("valve", help="Show one valve")
    p_valve.add_argument("valve_id")

    p_lot = sub.add_parser("lot", help="Zones a lot belongs to")
    p_lot.add_argument("lot")

    p_zone = sub.add_parser("zone", help="Lots in a zone")
    p_zone.add_argument("zone")

    p_search = sub.add_parser("search", help="Search valve ids, zones, lots and locations")
    p_search.add_argument("terms", nargs="+", help='One or more terms, e.g. "Zone 3" or V1 V2')
    p_search.add_argument("--output", type=str, default=None, help="Also write the result tables to this .xlsx")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    cfg = build_config_from_env()
    if args.workbook:
        cfg.workbook_path = Path(args.workbook).expanduser()

    service = ValveLookupService.from_workbook(cfg)

    try:
        return _run(service, args)
    except ValveLookupError as e:
        print(f"{e.kind}: {e}", file=sys.stderr)
        return 1


def _run(service: ValveLookupService, args: argparse.Namespace) -> int:
    if args.command == "valves":
        res = service.get_all_valves()
        if args.json:
            _print_json(res.to_record())
        else:
            if res.stale:
                print(f"Showing cached data (last updated: {res.updated_at})")
            print(build_valve_table(res.data).to_string(index=False))
        return 0

    if args.command == "valve":
        valve = service.get_valve_by_id(args.valve_id)
        if valve is None:
            print(f"Valve not found: {args.valve_id}", file=sys.stderr)
            return 2
        if args.json:
            _print_json(valve.to_record())
        else:
            print(build_valve_table([valve]).T.to_string(header=False))
        return 0

    if args.command == "lot":
        zones = service.get_zones_for_lot(args.lot)
        if args.json:
            _print_json({"lot": args.lot, "zones": zones})
        else:
            print(f"Lot {args.lot}: {', '.join(zones) or '(no zones)'}")
        return 0

    if args.command == "zone":
        lots = service.get_lots_for_zone(args.zone)
        if args.json:
            _print_json({"zone": args.zone, "lots": lots})
        else:
            print(f"Zone {args.zone}: {', '.join(lots) or '(no lots)'}")
        return 0

    # search
    result, report = service.shutoff_report(args.terms)
    if args.json:
        _print_json({"result": result.to_record(), "shutoff": report.to_record()})
    else:
        print(format_search_summary(result, report))

    if args.output:
        out = write_search_workbook(args.output, result, report)
        print(f"Results saved to: {out.resolve()}")
    return 0


def _print_json(obj: object) -> None:
    print(json.dumps(obj, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    raise SystemExit(main())
