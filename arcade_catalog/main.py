import argparse
import sys

from arcade_catalog.browse.sorting import SortMode
from arcade_catalog.config import get_config
from arcade_catalog.core.catalog import Catalog
from arcade_catalog.core.formatting import format_size
from arcade_catalog.core.maintenance import purge_broken_previews
from arcade_catalog.errors import CatalogError, NetworkUnavailableError
from arcade_catalog.models.station import STATION_TEMPLATES


def _print_progress(current: int, total: int, name: str) -> None:
    print(f"  [{current}/{total}] {name}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Arcade Catalog: ROM station browser")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("stations", help="List configured stations.")
    sub.add_parser("templates", help="List predefined station templates.")

    add = sub.add_parser("add-station", help="Add a station from a template or from explicit values.")
    add.add_argument("short_name")
    add.add_argument("--name", help="Display name (required when no template matches).")
    add.add_argument("--path", help="ROM folder relative to the games folder.")
    add.add_argument("--launcher", default="")
    add.add_argument("--extensions", default="")

    remove = sub.add_parser("remove-station", help="Remove a station and its entries.")
    remove.add_argument("station_id", type=int)

    scan = sub.add_parser("scan", help="Scan one station or all stations.")
    scan.add_argument("station_id", type=int, nargs="?")

    lst = sub.add_parser("list", help="Scan, then list entries.")
    lst.add_argument("--station", type=int)
    lst.add_argument("--filter", default="")
    lst.add_argument("--sort", choices=[m.value for m in SortMode])

    fetch = sub.add_parser("fetch", help="Download missing previews for a station.")
    fetch.add_argument("station_id", type=int)

    clear = sub.add_parser("clear-cache", help="Delete cached previews.")
    clear.add_argument("--station", type=int)
    return parser


def run(args_list=None) -> int:
    args = _build_parser().parse_args(args_list)

    catalog = Catalog(get_config())
    catalog.load()

    try:
        if args.command == "stations":
            for station in catalog.registry.stations():
                print(f"{station.id:>2}  {station.short_name:<10} {station.name}  ({station.rom_path}; {station.extensions})")

        elif args.command == "templates":
            for template in STATION_TEMPLATES:
                print(f"{template.short_name:<10} {template.name}  [{template.extensions}]")

        elif args.command == "add-station":
            if args.name:
                station_id = catalog.add_station(args.name, args.short_name, args.path or args.short_name,
                                                 args.launcher, args.extensions)
            else:
                station_id = catalog.registry.add_from_template(args.short_name, args.path)
            print(f"✅ Added station {args.short_name} in slot {station_id}")

        elif args.command == "remove-station":
            catalog.remove_station(args.station_id)
            print(f"✅ Removed station {args.station_id}")

        elif args.command == "scan":
            if args.station_id is None:
                total = catalog.scan_all(progress_callback=lambda x: print(f"  {x}"))
            else:
                total = catalog.scan_station(args.station_id, progress_callback=lambda x: print(f"  {x}"))
            print(f"📊 {total} entries indexed")

        elif args.command == "list":
            if args.station is None:
                catalog.scan_all()
            else:
                catalog.scan_station(args.station)
            catalog.browse(args.station)
            if args.filter:
                catalog.set_filter(args.filter)
            if args.sort:
                catalog.sort(SortMode(args.sort))
            for entry in catalog.view.entries:
                print(f"{catalog.view.row_label(entry):<40} {format_size(entry.size):>10}")

        elif args.command == "fetch":
            purge_broken_previews(catalog.config)
            if not catalog.resolver.check_internet():
                raise NetworkUnavailableError("No internet connection; previews cannot be downloaded")
            catalog.scan_station(args.station_id)
            count = catalog.batch_fetch(args.station_id, _print_progress)
            print(f"📊 {count} previews downloaded")

        elif args.command == "clear-cache":
            if args.station is None:
                catalog.cache_clear()
            else:
                catalog.cache_clear_station(args.station)

    except KeyboardInterrupt:
        print("\n⚠️ Interrupted.")
        catalog.scan_cancel()
        catalog.batch_cancel()
        return 130
    except (CatalogError, KeyError) as e:
        print(f"❌ Error: {e}")
        return 1
    finally:
        catalog.close()

    return 0


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
