"""Command-line entry point.

Examples:
    python -m itinerary_router --origin-coord 104.06,30.67 --city 成都 \\
        --place 宽窄巷子 --place 武侯祠 --place 春熙路

    python -m itinerary_router --origin-text 天府广场 --city-code 510100 \\
        --place 杜甫草堂
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional, Sequence

from .config import configure_logging, get_config
from .container import get_container
from .domain.errors import (
    ConfigurationError,
    InvalidOriginError,
    InvalidRequestError,
    NoPlacesResolvedError,
)
from .domain.models import CoordinateOrigin, OriginInput, TextOrigin
from .routing import wgs84_to_gcj02
from .services import ItineraryPlanner


def _parse_coord(value: str) -> tuple[float, float]:
    parts = [p.strip() for p in value.split(",")]
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(f"expected 'lng,lat', got {value!r}")
    try:
        return float(parts[0]), float(parts[1])
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected numbers in {value!r}") from e


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="itinerary_router",
        description="Plan a multi-stop public transit itinerary inside one city",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    origin = p.add_mutually_exclusive_group(required=True)
    origin.add_argument(
        "--origin-coord",
        type=_parse_coord,
        metavar="LNG,LAT",
        help="Origin as GCJ-02 coordinates, e.g. 104.06,30.67",
    )
    origin.add_argument("--origin-text", help="Origin as a place name or address")
    p.add_argument("--origin-name", default=None, help="Display name of a coordinate origin")
    p.add_argument(
        "--wgs84",
        action="store_true",
        help="Origin coordinates are WGS-84 (GPS) and are converted to GCJ-02",
    )
    p.add_argument(
        "--place",
        dest="places",
        action="append",
        required=True,
        help="Place to visit (repeat for several)",
    )
    p.add_argument("--city", default=None, help="Target city name, e.g. '成都'")
    p.add_argument("--city-code", default=None, help="Target city adcode, e.g. 510100")
    p.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Request deadline in seconds (default: from configuration)",
    )
    p.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Override ITR_LOG_LEVEL",
    )
    return p.parse_args(argv)


def _origin_from_args(args: argparse.Namespace) -> OriginInput:
    if args.origin_coord is not None:
        lng, lat = args.origin_coord
        if args.wgs84:
            lng, lat = wgs84_to_gcj02(lng, lat)
        return CoordinateOrigin(lng=lng, lat=lat, name=args.origin_name)
    return TextOrigin(text=args.origin_text)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)

    observability = get_config().observability
    if args.log_level:
        observability = observability.model_copy(update={"level": args.log_level})
    configure_logging(observability)

    try:
        planner: ItineraryPlanner = get_container().resolve(ItineraryPlanner)
        result = planner.plan_itinerary(
            _origin_from_args(args),
            args.places,
            city_hint=args.city,
            city_code=args.city_code,
            timeout_seconds=args.timeout,
        )
    except NoPlacesResolvedError as e:
        lines: List[str] = [f"error: {e.message}"]
        lines.extend(f"  {f.name}: {f.reason} {f.detail}".rstrip() for f in e.failed)
        print("\n".join(lines), file=sys.stderr)
        return 1
    except (InvalidOriginError, InvalidRequestError, ConfigurationError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
