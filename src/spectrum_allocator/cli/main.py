"""CLI entry points for Spectrum Allocator.

Bounds and sub-ranges are given in MHz and band spacing in kHz; both are
converted to integer Hz without rounding before they reach the engine.
"""

from __future__ import annotations

import argparse
import logging
import sys

from rich.prompt import Confirm

from spectrum_allocator.allocation import SpectrumService
from spectrum_allocator.allocation.results import AllocationResult
from spectrum_allocator.core.config import KHZ, MHZ, get_config
from spectrum_allocator.core.exceptions import SpectrumError
from spectrum_allocator.core.grid import to_base_units
from spectrum_allocator.storage import Band, SpectrumDB
from spectrum_allocator.ui import (
    display_bands,
    display_channels,
    display_history,
    display_occupancies,
    display_result,
    display_statistics,
    print_banner,
    print_error,
    print_warning,
)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--db",
        type=str,
        default=None,
        help="DuckDB path (default: $SPECTRUM_DB_PATH or data/spectrum.duckdb)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )


def _add_range_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("band_id", help="Band ID or name")
    parser.add_argument(
        "-s",
        "--start",
        type=str,
        default=None,
        help="Range start in MHz (default: band lower bound)",
    )
    parser.add_argument(
        "-e",
        "--end",
        type=str,
        default=None,
        help="Range end in MHz (default: band upper bound)",
    )


def _add_holder_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--holder", type=str, required=True, help="Holder (user) ID")
    parser.add_argument("--email", type=str, required=True, help="Holder contact email")
    parser.add_argument("--lat", type=float, default=0.0, help="Holder latitude (default: 0)")
    parser.add_argument("--lon", type=float, default=0.0, help="Holder longitude (default: 0)")


def _lookup_band(db: SpectrumDB, key: str) -> Band:
    """Find a band by name, falling back to its ID."""
    return db.find_band_by_name(key) or db.get_band(key)


def _resolve_range(band: Band, args: argparse.Namespace) -> tuple[int, int]:
    start = band.from_hz if args.start is None else to_base_units(args.start, MHZ, "start")
    end = band.to_hz if args.end is None else to_base_units(args.end, MHZ, "end")
    return start, end


def _finish(result: AllocationResult) -> None:
    display_result(result)
    if not result.ok:
        sys.exit(1)


def band(argv: list[str] | None = None) -> None:
    """Band administration CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Spectrum Bands - Define the bands channels are allocated from"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    add_parser = subparsers.add_parser("add", help="Define a new band")
    add_parser.add_argument("--name", type=str, required=True, help="Band name (e.g. VHF)")
    add_parser.add_argument("--from", dest="from_mhz", type=str, required=True, help="Lower bound in MHz")
    add_parser.add_argument("--to", dest="to_mhz", type=str, required=True, help="Upper bound in MHz")
    add_parser.add_argument("--spacing", type=str, required=True, help="Channel spacing in kHz")
    _add_common_arguments(add_parser)

    list_parser = subparsers.add_parser("list", help="List all bands")
    _add_common_arguments(list_parser)

    edit_parser = subparsers.add_parser("edit", help="Edit a band")
    edit_parser.add_argument("band_id", help="Band ID or name")
    edit_parser.add_argument("--name", type=str, default=None, help="New name")
    edit_parser.add_argument("--from", dest="from_mhz", type=str, default=None, help="New lower bound in MHz")
    edit_parser.add_argument("--to", dest="to_mhz", type=str, default=None, help="New upper bound in MHz")
    edit_parser.add_argument("--spacing", type=str, default=None, help="New spacing in kHz")
    _add_common_arguments(edit_parser)

    delete_parser = subparsers.add_parser("delete", help="Delete a band")
    delete_parser.add_argument("band_id", help="Band ID or name")
    _add_common_arguments(delete_parser)

    show_parser = subparsers.add_parser("show", help="Show channel occupancy of a band")
    _add_range_arguments(show_parser)
    _add_common_arguments(show_parser)

    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    db_path = args.db or get_config().db_path

    try:
        with SpectrumDB(db_path) as db:
            service = SpectrumService(db)

            if args.command == "add":
                result = service.create_band(
                    args.name,
                    to_base_units(args.from_mhz, MHZ, "from"),
                    to_base_units(args.to_mhz, MHZ, "to"),
                    to_base_units(args.spacing, KHZ, "spacing"),
                )
                display_result(result)
                if not result.ok:
                    sys.exit(1)
                display_bands([result.band])

            elif args.command == "list":
                display_bands(db.list_bands())
                display_statistics(db.get_statistics())

            elif args.command == "edit":
                result = service.update_band(
                    _lookup_band(db, args.band_id).id,
                    name=args.name,
                    from_hz=None if args.from_mhz is None else to_base_units(args.from_mhz, MHZ, "from"),
                    to_hz=None if args.to_mhz is None else to_base_units(args.to_mhz, MHZ, "to"),
                    spacing_hz=None if args.spacing is None else to_base_units(args.spacing, KHZ, "spacing"),
                )
                _finish(result)

            elif args.command == "delete":
                _finish(service.delete_band(_lookup_band(db, args.band_id).id))

            elif args.command == "show":
                selected = _lookup_band(db, args.band_id)
                start, end = _resolve_range(selected, args)
                display_channels(selected, service.allocator.band_status(selected, start, end))

    except SpectrumError as e:
        print_error(e.message)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nCancelled")


def alloc(argv: list[str] | None = None) -> None:
    """Channel allocation CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Spectrum Allocation - Acquire and release channels in a band"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    range_parser = subparsers.add_parser("range", help="Acquire every free channel in a range")
    _add_range_arguments(range_parser)
    _add_holder_arguments(range_parser)
    _add_common_arguments(range_parser)

    first_parser = subparsers.add_parser("first-n", help="Acquire the first N free channels in a range")
    _add_range_arguments(first_parser)
    first_parser.add_argument("-n", type=int, required=True, help="Number of channels")
    _add_holder_arguments(first_parser)
    _add_common_arguments(first_parser)

    choose_parser = subparsers.add_parser("choose", help="Preview N spaced channels, then confirm")
    _add_range_arguments(choose_parser)
    choose_parser.add_argument("-n", type=int, required=True, help="Number of channels")
    choose_parser.add_argument(
        "--spacing",
        type=str,
        default=None,
        help="Preferred separation in MHz (default: by band name)",
    )
    choose_parser.add_argument("-y", "--yes", action="store_true", help="Confirm without prompting")
    choose_parser.add_argument("--dry-run", action="store_true", help="Only show the preview")
    _add_holder_arguments(choose_parser)
    _add_common_arguments(choose_parser)

    release_parser = subparsers.add_parser("release", help="Release your channels in a range")
    _add_range_arguments(release_parser)
    release_parser.add_argument("--holder", type=str, required=True, help="Holder (user) ID")
    _add_common_arguments(release_parser)

    debar_parser = subparsers.add_parser("debar", help="Forbid every free channel in a range")
    _add_range_arguments(debar_parser)
    _add_common_arguments(debar_parser)

    allow_parser = subparsers.add_parser("allow", help="Lift forbidden channels in a range")
    _add_range_arguments(allow_parser)
    _add_common_arguments(allow_parser)

    acquire_parser = subparsers.add_parser("acquire", help="Acquire one channel")
    acquire_parser.add_argument("band_id", help="Band ID or name")
    acquire_parser.add_argument("--freq", type=str, required=True, help="Channel in MHz")
    _add_holder_arguments(acquire_parser)
    _add_common_arguments(acquire_parser)

    drop_parser = subparsers.add_parser("drop", help="Release one channel")
    drop_parser.add_argument("--freq", type=str, required=True, help="Channel in MHz")
    drop_parser.add_argument("--holder", type=str, default=None, help="Only if held by this holder")
    _add_common_arguments(drop_parser)

    drop_all_parser = subparsers.add_parser("drop-all", help="Release every channel of a holder")
    drop_all_parser.add_argument("--holder", type=str, required=True, help="Holder (user) ID")
    _add_common_arguments(drop_all_parser)

    mine_parser = subparsers.add_parser("mine", help="List channels held by a holder")
    mine_parser.add_argument("--holder", type=str, required=True, help="Holder (user) ID")
    _add_common_arguments(mine_parser)

    history_parser = subparsers.add_parser("history", help="Show allocation history of a channel")
    history_parser.add_argument("--freq", type=str, required=True, help="Channel in MHz")
    _add_common_arguments(history_parser)

    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    config = get_config()
    db_path = args.db or config.db_path

    try:
        with SpectrumDB(db_path) as db:
            service = SpectrumService(db, config)

            if args.command in ("range", "first-n", "choose", "release"):
                selected = _lookup_band(db, args.band_id)
                start, end = _resolve_range(selected, args)
                bounds = (selected.from_hz, selected.to_hz, selected.spacing_hz)

            if args.command == "range":
                _finish(
                    service.range_allocate(
                        *bounds, start, end, args.holder, args.email, args.lat, args.lon
                    )
                )

            elif args.command == "first-n":
                _finish(
                    service.range_allocate_first_n(
                        *bounds, start, end, args.n, args.holder, args.email, args.lat, args.lon
                    )
                )

            elif args.command == "choose":
                if args.spacing is None:
                    secondary = config.secondary_spacing_for(selected.name)
                else:
                    secondary = to_base_units(args.spacing, MHZ, "spacing")

                print_banner(f"Choosing {args.n} channels in {selected.name}")
                preview = service.choose_range(*bounds, start, end, args.n, secondary)
                _finish(preview)

                if args.dry_run:
                    return
                if not args.yes and not Confirm.ask("Acquire these frequencies?"):
                    print_warning("Nothing acquired")
                    return
                _finish(
                    service.confirm_range(
                        *bounds, start, end, preview.data, args.holder, args.email, args.lat, args.lon
                    )
                )

            elif args.command == "release":
                _finish(service.range_delete(*bounds, start, end, args.holder))

            elif args.command in ("debar", "allow"):
                selected = _lookup_band(db, args.band_id)
                start, end = _resolve_range(selected, args)
                if args.command == "debar":
                    _finish(service.debar_range(selected.id, start, end))
                else:
                    _finish(service.allow_range(selected.id, start, end))

            elif args.command == "acquire":
                selected = _lookup_band(db, args.band_id)
                _finish(
                    service.acquire_frequency(
                        selected.from_hz,
                        selected.to_hz,
                        selected.spacing_hz,
                        to_base_units(args.freq, MHZ, "freq"),
                        args.holder,
                        args.email,
                        args.lat,
                        args.lon,
                    )
                )

            elif args.command == "drop":
                _finish(service.release_frequency(to_base_units(args.freq, MHZ, "freq"), args.holder))

            elif args.command == "drop-all":
                _finish(service.release_all(args.holder))

            elif args.command == "mine":
                display_occupancies(service.allocator.holder_channels(args.holder))

            elif args.command == "history":
                value = to_base_units(args.freq, MHZ, "freq")
                display_history(value, service.allocator.channel_history(value))

    except SpectrumError as e:
        print_error(e.message)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nCancelled")


if __name__ == "__main__":
    alloc()
