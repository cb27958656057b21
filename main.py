#!/usr/bin/env python3
"""
CredSeal -- Salted password digests and passphrase encryption of JSON values.

Usage:
  python main.py issue
  python main.py verify 3F:9B2C...E1:A0
  python main.py encrypt --file data.json
  echo '{"user": "alice"}' | python main.py encrypt
  python main.py decrypt 010f0801a3...
  python main.py token --size 8
  python main.py token --digits

Passwords and passphrases are read with getpass so they never appear in shell
history or the process list.

Environment variables:
  CREDSEAL_PASSPHRASE   Passphrase for encrypt/decrypt (skips the prompt).
                        Convenient for scripts; visible to other processes of
                        the same user, so prefer the prompt interactively.
"""

import argparse
import getpass
import json
import logging
import os
import sys
from pathlib import Path

from auth.credentials import issue_credential, verify_credential
from auth.tokens import ALPHANUMERIC, DIGITS, LETTERS, random_string
from core.errors import CodecError
from vault.codec import decrypt, encrypt

logger = logging.getLogger("credseal.cli")

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_ERROR = 2


def _read_secret(prompt: str, env_var: str | None = None) -> str:
    if env_var:
        value = os.environ.get(env_var)
        if value:
            return value
    return getpass.getpass(prompt)


def _read_json(path: str | None):
    """Load the JSON document to encrypt from a file, or stdin when path is None."""
    if path is None:
        return json.load(sys.stdin)
    file_path = Path(path).resolve()
    if not file_path.is_file():
        raise OSError(f"'{path}' is not a readable file.")
    return json.loads(file_path.read_text(encoding="utf-8"))


def cmd_issue(args: argparse.Namespace) -> int:
    password = _read_secret("Password: ")
    if password != _read_secret("Repeat password: "):
        print("  [!] Passwords do not match.", file=sys.stderr)
        return EXIT_ERROR
    try:
        print(issue_credential(password))
    except ValueError as e:
        print(f"  [!] {e}", file=sys.stderr)
        return EXIT_ERROR
    return EXIT_OK


def cmd_verify(args: argparse.Namespace) -> int:
    if verify_credential(_read_secret("Password: "), args.record):
        print("valid")
        return EXIT_OK
    print("invalid")
    return EXIT_INVALID


def cmd_encrypt(args: argparse.Namespace) -> int:
    try:
        value = _read_json(args.file)
    except (OSError, ValueError) as e:
        print(f"  [!] Could not read JSON input: {e}", file=sys.stderr)
        return EXIT_ERROR
    passphrase = _read_secret("Passphrase: ", "CREDSEAL_PASSPHRASE")
    try:
        print(encrypt(value, passphrase))
    except (CodecError, ValueError) as e:
        print(f"  [!] {e}", file=sys.stderr)
        return EXIT_ERROR
    return EXIT_OK


def cmd_decrypt(args: argparse.Namespace) -> int:
    passphrase = _read_secret("Passphrase: ", "CREDSEAL_PASSPHRASE")
    try:
        value = decrypt("".join(args.payload), passphrase)
    except (CodecError, ValueError) as e:
        logger.debug("Decryption failed", exc_info=True)
        print(f"  [!] {e}", file=sys.stderr)
        return EXIT_ERROR
    print(json.dumps(value, indent=2, ensure_ascii=False))
    return EXIT_OK


def cmd_token(args: argparse.Namespace) -> int:
    chars = DIGITS if args.digits else LETTERS if args.letters else args.chars
    try:
        print(random_string(args.size, chars))
    except ValueError as e:
        print(f"  [!] {e}", file=sys.stderr)
        return EXIT_ERROR
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="credseal",
        description="Salted password digests and passphrase encryption of JSON values.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py issue
  python main.py verify 3F:9B2C...E1:A0
  python main.py encrypt --file data.json > data.enc
  python main.py decrypt "$(cat data.enc)"
  python main.py token --size 12
        """,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging on stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("issue", help="Create a salted digest record for a password")
    p.set_defaults(func=cmd_issue)

    p = sub.add_parser("verify", help="Check a password against a record (exit 0 valid, 1 invalid)")
    p.add_argument("record", metavar="RECORD", help="LEFT:DIGEST:RIGHT record")
    p.set_defaults(func=cmd_verify)

    p = sub.add_parser("encrypt", help="Encrypt a JSON document under a passphrase")
    p.add_argument("--file", metavar="PATH", help="JSON file to encrypt (default: stdin)")
    p.set_defaults(func=cmd_encrypt)

    p = sub.add_parser("decrypt", help="Decrypt a payload and print the JSON value")
    p.add_argument("payload", nargs="+", metavar="HEX", help="Hex payload (whitespace-separated parts are joined)")
    p.set_defaults(func=cmd_decrypt)

    p = sub.add_parser("token", help="Print a random token")
    p.add_argument("--size", type=int, default=6, metavar="N", help="Token length (default: 6)")
    group = p.add_mutually_exclusive_group()
    group.add_argument("--digits", action="store_true", help="Digits only")
    group.add_argument("--letters", action="store_true", help="ASCII letters only")
    group.add_argument("--chars", default=ALPHANUMERIC, metavar="ALPHABET", help="Custom alphabet")
    p.set_defaults(func=cmd_token)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
