"""
keyescrow CLI: entry point for escrow runs.

Usage:
    keyescrow run --input devices.txt --vault kv-escrow    # Escrow keys for a device list
    keyescrow version                                      # Show version
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
from pathlib import Path

from keyescrow.errors import EscrowError


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="keyescrow",
        description="Escrow BitLocker recovery keys from Microsoft Graph into Azure Key Vault.",
    )
    parser.add_argument("--version", action="store_true", help="Show version and exit")

    subparsers = parser.add_subparsers(dest="command")

    # run
    run_parser = subparsers.add_parser("run", help="Escrow recovery keys for a device list")
    run_parser.add_argument("--input", "-i", type=str, help="Device object id list (one per line)")
    run_parser.add_argument("--vault", type=str, help="Key Vault name")
    run_parser.add_argument("--output-dir", "-o", type=str, help="Directory for the CSV and log")
    run_parser.add_argument("--template", type=str, help="Secret name template")
    run_parser.add_argument("--content-type", type=str, help="Content type stored with each secret")
    run_parser.add_argument("--tenant-id", type=str, help="Entra ID tenant id")
    run_parser.add_argument("--client-id", type=str, help="App registration client id")
    run_parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    # version
    subparsers.add_parser("version", help="Show version")

    args = parser.parse_args(argv)

    if args.version or args.command == "version":
        from keyescrow import __version__

        print(f"keyescrow {__version__}")
        return 0

    if args.command == "run":
        return _cmd_run(args)
    parser.print_help()
    return 0


def _config_from_args(args: argparse.Namespace):
    from keyescrow.config import EscrowConfig

    cfg = EscrowConfig.from_env()
    overrides: dict[str, object] = {}
    if args.input:
        overrides["input_path"] = Path(args.input)
    if args.vault:
        overrides["vault_name"] = args.vault
    if args.output_dir:
        overrides["output_dir"] = Path(args.output_dir)
    if args.template:
        overrides["name_template"] = args.template
    if args.content_type:
        overrides["content_type"] = args.content_type
    if args.tenant_id:
        overrides["tenant_id"] = args.tenant_id
    if args.client_id:
        overrides["client_id"] = args.client_id
    return dataclasses.replace(cfg, **overrides)


def _cmd_run(args: argparse.Namespace) -> int:
    from keyescrow.runner import run

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # Request URLs can carry ids; keep HTTP client chatter out of normal output
    for noisy in ("httpx", "azure"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    try:
        result = run(_config_from_args(args))
    except EscrowError as e:
        print(f"Error: {e}")
        return 1

    print(f"Escrow run finished: {result.summary}")
    print(f"  CSV: {result.paths.csv_path}")
    print(f"  Log: {result.paths.log_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
