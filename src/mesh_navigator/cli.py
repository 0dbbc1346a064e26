"""Command-line entry point: mesh-navigator."""

import argparse
import logging
import signal
import sys
from dataclasses import replace

from .config import Config, load_config
from .core import ControlMap
from .providers import FilesystemStore
from .transport import MeshtasticTransport
from .server import NavigatorServer

EPILOG = """
examples:
  %(prog)s -r ~/mesh-content            serve a folder over the default radio
  %(prog)s -c navigator.yaml            read settings from a file
  %(prog)s -r ./docs -t 600             sessions stay open for 10 minutes
  %(prog)s --serial /dev/ttyACM0        pick the serial port explicitly
  %(prog)s --ble 01:23:45:67:89:AB      talk to the radio over Bluetooth
  %(prog)s --tcp meshtastic.local       talk to a networked radio
"""


def setup_logging(verbose: bool = False) -> None:
    """Log to stderr; DEBUG when verbose, INFO otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="mesh-navigator",
        description="Page through a folder of documents over a Meshtastic mesh",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EPILOG,
    )
    parser.add_argument("-c", "--config", metavar="FILE", help="YAML settings file")
    parser.add_argument("-r", "--root", metavar="DIR", help="folder of documents to serve")
    parser.add_argument(
        "-t", "--timeout",
        metavar="SECONDS",
        type=float,
        help="close navigation sessions after this much inactivity",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")

    radio = parser.add_mutually_exclusive_group()
    radio.add_argument(
        "--serial",
        metavar="PORT",
        nargs="?",
        const="auto",
        help="serial radio; without PORT the first radio found is used",
    )
    radio.add_argument("--ble", metavar="ADDRESS", help="Bluetooth LE radio")
    radio.add_argument("--tcp", metavar="HOST", help="radio reachable over TCP")

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> Config:
    """
    Settings from the config file (or defaults) with command line overrides.

    Raises:
        FileNotFoundError: If --config names a missing file.
    """
    config = load_config(args.config) if args.config else Config()

    overrides = {}
    if args.root:
        overrides["root_directory"] = args.root
    if args.timeout is not None:
        overrides["timeout_seconds"] = args.timeout

    if args.serial is not None:
        overrides.update(connection_type="serial", device=None if args.serial == "auto" else args.serial)
    elif args.ble:
        overrides.update(connection_type="ble", device=args.ble)
    elif args.tcp:
        overrides.update(connection_type="tcp", device=args.tcp)

    return replace(config, **overrides)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        config = build_config(args)
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1

    root_path = config.get_root_path()
    if not root_path.is_dir():
        logger.error(f"Not a directory: {root_path} (set navigator.root_directory or pass -r)")
        return 1

    try:
        controls = ControlMap(config.controls)
        store = FilesystemStore(root_path)
        transport = MeshtasticTransport(
            connection_type=config.connection_type,
            device=config.device,
            max_message_size=config.max_message_size,
            ack_timeout=config.ack_timeout_seconds,
            hint=controls.hint(),
        )
        server = NavigatorServer(store, transport, config)
    except Exception as e:
        logger.error(f"Startup failed: {e}")
        return 1

    def shutdown(signum, frame):
        logger.info(f"Received signal {signum}, shutting down")
        server.stop()
        sys.exit(0)

    for signum in (signal.SIGINT, signal.SIGTERM):
        signal.signal(signum, shutdown)

    logger.info(f"Serving {root_path} (pages of {config.page_budget} chars, {config.timeout_seconds}s session timeout)")
    logger.info(f"Controls: {controls.hint()}")

    try:
        server.start()
        signal.pause()
    except Exception as e:
        logger.error(f"Server error: {e}")
        return 1
    finally:
        server.stop()

    return 0


if __name__ == "__main__":
    sys.exit(main())
