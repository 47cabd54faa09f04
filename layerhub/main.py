"""Main application entry point."""

import argparse
import logging
import sys


def setup_logging(verbose: bool = False):
    """
    Set up logging configuration.

    Args:
        verbose: Enable verbose logging
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(),
        ],
    )


def cmd_load(args):
    """Handle load subcommand - build a map from one or more config files."""
    setup_logging(args.verbose)
    from layerhub.cli import run_cli

    config_files = args.config if isinstance(args.config, list) else [args.config]
    total_files = len(config_files)
    failed_files = []

    for idx, config_path in enumerate(config_files, 1):
        if total_files > 1:
            logging.info(f"Processing config {idx}/{total_files}: {config_path}")

        try:
            exit_code = run_cli(config_path)
        except KeyboardInterrupt:
            logging.warning(f"Interrupted while processing: {config_path}")
            failed_files.append(config_path)
            break

        if exit_code != 0:
            failed_files.append(config_path)
            logging.error(f"Failed to process: {config_path}")

            if args.stop_on_error:
                logging.error("Stopping due to --stop-on-error flag")
                break

    if total_files > 1:
        logging.info(f"Total configs: {total_files}")
        logging.info(f"Successful:    {total_files - len(failed_files)}")
        logging.info(f"Failed:        {len(failed_files)}")

    # Return non-zero exit code if any files failed
    return 1 if failed_files else 0


def cmd_resolve(args):
    """Handle resolve subcommand - list descriptors matching KEY=VALUE pairs."""
    setup_logging(args.verbose)
    from layerhub.cli import parse_match_spec, resolve_layers

    try:
        match_spec = parse_match_spec(args.attributes)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        descriptors = resolve_layers(match_spec, source=args.source, limit=args.limit)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not descriptors:
        print("No matching layers.")
        return 1

    for descriptor in descriptors:
        print(f"  {descriptor.id:8} - {descriptor.name}")
        print(f"           Type: {descriptor.typ}, URL: {descriptor.url}")
        if descriptor.dataset_ids:
            print(f"           Datasets: {', '.join(descriptor.dataset_ids)}")
        print()

    return 0


def cmd_list_types(args):
    """Handle list-types subcommand."""
    from layerhub.builders import LAYER_TYPES

    print("Supported layer types:")
    print()

    for type_name, display_name in LAYER_TYPES.describe():
        print(f"  {type_name:8} - {display_name}")

    return 0


def main():
    """Main application entry point."""
    parser = argparse.ArgumentParser(
        description="layerhub - resolve services registry layers and attach them to maps",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Load subcommand
    load_parser = subparsers.add_parser("load", help="Build maps from YAML configuration files")
    load_parser.add_argument("config", nargs="+", help="YAML configuration file(s) to process")
    load_parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    load_parser.add_argument(
        "--stop-on-error", action="store_true", help="Stop processing remaining configs if one fails"
    )
    load_parser.set_defaults(func=cmd_load)

    # Resolve subcommand
    resolve_parser = subparsers.add_parser("resolve", help="List registry entries matching attributes")
    resolve_parser.add_argument("attributes", nargs="*", help="KEY=VALUE pairs, e.g. md_id=<uuid> or typ=WMS")
    resolve_parser.add_argument("--source", help="Services registry URL or local JSON/YAML file")
    resolve_parser.add_argument("--limit", type=int, help="Maximum number of results")
    resolve_parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    resolve_parser.set_defaults(func=cmd_resolve)

    # List types subcommand
    types_parser = subparsers.add_parser("list-types", help="List supported layer types")
    types_parser.set_defaults(func=cmd_list_types)

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
