import argparse
import json
import os
import sys
from importlib.metadata import version
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

from .driver import GceDriver
from .errors import KitchenGceError
from .logger import logger, set_verbosity
from .schemas.config import Area, DriverConfig
from .schemas.state import InstanceState, load_state, save_state

# Credentials fall back to these when not passed on the command line
ENV_SETTINGS = {
    "google_client_email": "GOOGLE_CLIENT_EMAIL",
    "google_key_location": "GOOGLE_KEY_LOCATION",
    "google_json_key": "GOOGLE_JSON_KEY",
    "google_project": "GOOGLE_PROJECT",
}

CONFIG_FLAGS = [
    "area",
    "zone_name",
    "inst_name",
    "machine_type",
    "network",
    "tags",
    "username",
    "image_name",
    "disk_size",
    "public_key_path",
    *ENV_SETTINGS,
]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kitchen-gce",
        description="kitchen-gce: Google Compute Engine instances for test suites",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create an instance for the default-debian suite
  kitchen-gce create --instance-name default-debian --image-name debian-12-bookworm-v20240910

  # Same, reading settings from a JSON file
  kitchen-gce create --config .kitchen-gce.config.json

  # Show and destroy it
  kitchen-gce status
  kitchen-gce destroy
""",
    )
    try:
        ver = version("kitchen-gce")
    except Exception:
        ver = "unknown"
    parser.add_argument("--version", action="version", version=f"kitchen-gce v{ver}")

    parser.add_argument(
        "action", choices=["create", "destroy", "status"], help="Lifecycle action"
    )
    parser.add_argument(
        "--state-file",
        type=Path,
        default=Path(".kitchen-gce.json"),
        help="Where instance state is kept between runs (default: .kitchen-gce.json)",
    )
    parser.add_argument("--config", type=Path, help="JSON file with driver settings")
    parser.add_argument(
        "--instance-name",
        default="default",
        help="Suite/platform name used to generate the instance name",
    )

    parser.add_argument("--area", choices=[a.value for a in Area])
    parser.add_argument("--zone-name", help="Deploy into this zone (skips selection)")
    parser.add_argument("--inst-name", help="Use this instance name as-is")
    parser.add_argument("--machine-type", help="e.g. n1-standard-1")
    parser.add_argument("--network", help="VPC network name")
    parser.add_argument("--tags", nargs="+", help="Network tags")
    parser.add_argument("--username", help="Login user (default: current user)")
    parser.add_argument("--image-name", help="Image for the boot disk")
    parser.add_argument("--disk-size", type=int, help="Boot disk size in GB")
    parser.add_argument("--public-key-path", help="SSH public key to publish")
    parser.add_argument("--google-client-email")
    parser.add_argument("--google-key-location")
    parser.add_argument("--google-json-key")
    parser.add_argument("--google-project")

    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="-v info, -vv debug"
    )
    return parser


def load_settings(args: argparse.Namespace) -> dict[str, Any]:
    """Merges the config file, environment and flags (flags win)."""
    settings: dict[str, Any] = {}
    if args.config:
        with args.config.open("r") as f:
            settings.update(json.load(f))

    for key, env_var in ENV_SETTINGS.items():
        if os.environ.get(env_var):
            settings.setdefault(key, os.environ[env_var])

    for key in CONFIG_FLAGS:
        value = getattr(args, key, None)
        if value is not None:
            settings[key] = value

    return settings


def print_status(state: InstanceState, console: Console) -> None:
    table = Table(title="kitchen-gce instance")
    table.add_column("Server", style="cyan")
    table.add_column("Hostname", style="green")
    table.add_row(state.server_id or "-", state.hostname or "-")
    console.print(table)


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    set_verbosity(args.verbose)

    console = Console()
    try:
        state = load_state(args.state_file)
    except (OSError, ValueError) as e:
        logger.error(f"Cannot read state file {args.state_file}: {e}")
        sys.exit(1)

    if args.action == "status":
        print_status(state, console)
        return

    try:
        config = DriverConfig.from_mapping(load_settings(args))
        driver = GceDriver(config, instance_name=args.instance_name)
        if args.action == "create":
            driver.create(state)
        else:
            driver.destroy(state)
    except (KitchenGceError, OSError, ValueError) as e:
        logger.error(f"{args.action.capitalize()} failed: {e}")
        sys.exit(1)
    finally:
        # Keep whatever was recorded, even on failure
        save_state(state, args.state_file)

    print_status(state, console)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        console = Console(stderr=True)
        console.print("\n[bold red]Operation cancelled by user.[/bold red]")
        sys.exit(130)
