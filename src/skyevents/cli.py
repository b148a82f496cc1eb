from __future__ import annotations

import argparse
import logging
import math
from datetime import date
import sys


def _parse_ymd(s: str) -> date:
    y, m, d = map(int, s.split("-"))
    return date(y, m, d)


def _describe(result) -> str:
    from skyevents.core.deltat import format_tt
    from skyevents.events.riseset import CrossingInstant

    if isinstance(result, CrossingInstant):
        return f"{format_tt(result.mjd)}  alt {math.degrees(result.altitude):+.4f} deg"
    return type(result).__name__


def cmd_riseset(argv: list[str]) -> int:
    from skyevents import api
    from skyevents.core.types import ObserverPosition
    from skyevents.events import riseset

    p = argparse.ArgumentParser(prog="skyevents riseset", description="Sunrise, sunset and transits of the Sun for a UTC date.")
    p.add_argument("--date", required=True, help="YYYY-MM-DD (UTC)")
    p.add_argument("--lat", type=float, required=True, help="Observer latitude in degrees")
    p.add_argument("--lon", type=float, required=True, help="Observer longitude in degrees (positive East)")
    p.add_argument("--alt", type=float, default=0.0, help="Observer altitude in metres")
    p.add_argument("--threshold-arcmin", type=float, default=None,
                   help="Solar angular radius in arcmin for the astronomical horizon (default: from distance)")
    p.add_argument("--twilight", choices=["civil", "nautical", "astronomical"], default=None)
    args = p.parse_args(argv)

    observer = ObserverPosition(math.radians(args.lon), math.radians(args.lat), args.alt)
    if args.twilight is not None:
        threshold = getattr(riseset, f"twilight_{args.twilight}")()
    elif args.threshold_arcmin is not None:
        threshold = riseset.horizon_astronomical(math.radians(args.threshold_arcmin / 60.0))
    else:
        threshold = None

    results = api.sun_events(_parse_ymd(args.date), observer, threshold=threshold)
    print(f"Date {args.date}, lat {args.lat:+.5f}, lon {args.lon:+.5f}")
    for r in results:
        print(f"  {r.event:<14} {_describe(r)}")
    return 0


def cmd_phases(argv: list[str]) -> int:
    from skyevents import api
    from skyevents.core.deltat import format_tt

    p = argparse.ArgumentParser(prog="skyevents phases", description="Moon phases with eclipse predictions.")
    p.add_argument("--begin", required=True, help="YYYY-MM-DD")
    p.add_argument("--end", required=True, help="YYYY-MM-DD")
    p.add_argument("--workers", type=int, default=1)
    args = p.parse_args(argv)

    for e in api.moon_phases(_parse_ymd(args.begin), _parse_ymd(args.end), max_workers=args.workers):
        line = f"{format_tt(e.mjd)}  {e.phase}"
        if e.eclipse is not None:
            line += f"  {e.eclipse.kind} eclipse, maximum {format_tt(e.eclipse.maximum_mjd)}"
        print(line)
    return 0


def cmd_lunar_eclipses(argv: list[str]) -> int:
    from skyevents import api
    from skyevents.core.deltat import format_tt

    p = argparse.ArgumentParser(prog="skyevents lunar-eclipses", description="Contacts of lunar eclipses.")
    p.add_argument("--begin", required=True, help="YYYY-MM-DD")
    p.add_argument("--end", required=True, help="YYYY-MM-DD")
    p.add_argument("--workers", type=int, default=1)
    args = p.parse_args(argv)

    def fmt(t):
        return format_tt(t) if t is not None else "-"

    for e in api.lunar_eclipses(_parse_ymd(args.begin), _parse_ymd(args.end), max_workers=args.workers):
        c = e.contacts
        print(f"{e.kind} lunar eclipse, maximum {format_tt(e.maximum)}, magnitude {e.magnitude:.3f}")
        print(f"  P1 {fmt(c.p1)}  U1 {fmt(c.u1)}  U2 {fmt(c.u2)}")
        print(f"  U3 {fmt(c.u3)}  U4 {fmt(c.u4)}  P4 {fmt(c.p4)}")
        print(f"  duration {e.duration_seconds / 60.0:.1f} min")
    return 0


def main(argv: list[str] | None = None) -> int:
    from skyevents.core.errors import SkyEventsError

    if argv is None:
        argv = sys.argv[1:]

    p = argparse.ArgumentParser(prog="skyevents", description="Rise/set/transit and eclipse contact solver.")
    p.add_argument("-v", "--verbose", action="store_true", help="Log solver progress to stderr")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("riseset", help="Sunrise, sunset and transits for a UTC date.")
    sub.add_parser("phases", help="Moon phases with eclipse predictions.")
    sub.add_parser("lunar-eclipses", help="Contacts of lunar eclipses.")

    args, rest = p.parse_known_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    commands = {
        "riseset": cmd_riseset,
        "phases": cmd_phases,
        "lunar-eclipses": cmd_lunar_eclipses,
    }
    try:
        return commands[args.cmd](rest)
    except SkyEventsError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
