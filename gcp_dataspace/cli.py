"""Command line access to the Secret Manager vault."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import AppConfig, VaultConfig, load_env_file
from .services import build_vault
from .vault.key_sanitizer import is_normalized, normalize_key

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="gcp-dataspace", description="Google Cloud vault utilities")
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to a JSON config file with a 'gcp' and 'vault' section",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Verbosity for logging output",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to .env file (default: .env)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    normalize = commands.add_parser("normalize-key", help="Print the Secret Manager id for a key")
    normalize.add_argument("key")

    secret = commands.add_parser("secret", help="Read, store or delete a secret")
    actions = secret.add_subparsers(dest="action", required=True)
    get = actions.add_parser("get")
    get.add_argument("key")
    put = actions.add_parser("put")
    put.add_argument("key")
    put.add_argument("value")
    delete = actions.add_parser("delete")
    delete.add_argument("key")

    return parser.parse_args(argv)


def load_vault_config(path: Optional[Path]) -> VaultConfig:
    if not path:
        raise ValueError("--config is required for secret commands")
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    config = AppConfig.from_json(path)
    if config.vault is None:
        raise ValueError(f"Config file {path} has no 'vault' section")
    return config.vault


def run_secret_command(args: argparse.Namespace) -> int:
    vault = build_vault(load_vault_config(args.config))

    if args.action == "get":
        value = vault.resolve_secret(args.key)
        if value is None:
            print(f"Secret {args.key} not found", file=sys.stderr)
            return 1
        print(value)
        return 0

    if args.action == "put":
        result = vault.store_secret(args.key, args.value)
    else:
        result = vault.delete_secret(args.key)

    if result.failed:
        print(result.failure_detail, file=sys.stderr)
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    load_env_file(Path(args.env_file))

    if args.command == "normalize-key":
        normalized = normalize_key(args.key)
        print(normalized)
        if not is_normalized(args.key):
            logger.info("Key %s was rewritten to %s", args.key, normalized)
        return 0

    return run_secret_command(args)


if __name__ == "__main__":
    sys.exit(main())
