#!/usr/bin/env python3
"""Generate the dashboard's process secrets.

Creates a new ``UP_TOKEN_ENCRYPTION_KEY`` (32 random bytes, hex) and
``SESSION_SECRET``, then stores them in the OS keychain or writes them
to the backend ``.env`` file.

Rotating ``UP_TOKEN_ENCRYPTION_KEY`` makes every stored Up token
undecryptable; users will be asked to re-enter their token.

Usage:
    python -m scripts.setup_secrets                 # prompt for destination
    python -m scripts.setup_secrets --env-file .env # write to .env
    python -m scripts.setup_secrets --keychain      # store in keychain
"""

import argparse
import secrets
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import dotenv_values, set_key

from services.credential_manager import get_credential, set_credential
from services.token_vault import TokenVault


def generate_secrets() -> dict[str, str]:
    """Return fresh values for every generated secret."""
    return {
        "UP_TOKEN_ENCRYPTION_KEY": TokenVault.generate_key(),
        "SESSION_SECRET": secrets.token_urlsafe(48),
    }


def existing_keys(env_path: Path) -> list[str]:
    """Names of generated secrets already set in ``.env`` or the keychain."""
    env_values = dotenv_values(env_path) if env_path.exists() else {}
    return [
        key
        for key in generate_secrets()
        if env_values.get(key) or get_credential(key)
    ]


def write_env_file(env_path: Path, values: dict[str, str]) -> None:
    env_path.touch(exist_ok=True)
    for key, value in values.items():
        set_key(str(env_path), key, value, quote_mode="never")
        print(f"  Wrote {key} to {env_path}")


def store_in_keychain(values: dict[str, str]) -> bool:
    ok = True
    for key, value in values.items():
        if set_credential(key, value):
            print(f"  Stored {key} in keychain")
        else:
            print(f"  Failed to store {key}")
            ok = False
    return ok


def main():
    parser = argparse.ArgumentParser(description="Generate dashboard encryption and session secrets")
    destination = parser.add_mutually_exclusive_group()
    destination.add_argument("--keychain", action="store_true", help="Store secrets in the OS keychain")
    destination.add_argument("--env-file", type=Path, help="Write secrets to this .env file")
    parser.add_argument("--force", action="store_true", help="Overwrite secrets that already exist")
    args = parser.parse_args()

    env_path = args.env_file or Path(__file__).parent.parent / ".env"

    present = existing_keys(env_path)
    if present and not args.force:
        print("These secrets are already configured:")
        for key in present:
            print(f"  {key}")
        print("Re-run with --force to replace them (stored Up tokens will become unreadable).")
        sys.exit(1)

    values = generate_secrets()

    if args.keychain:
        sys.exit(0 if store_in_keychain(values) else 1)
    if args.env_file:
        write_env_file(env_path, values)
        return

    answer = input("Store secrets in the OS keychain? [Y/n] ").strip().lower()
    if answer in ("", "y", "yes"):
        if store_in_keychain(values):
            return
        print("Falling back to .env")
    write_env_file(env_path, values)


if __name__ == "__main__":
    main()
