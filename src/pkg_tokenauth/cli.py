# src/pkg_tokenauth/cli.py

from __future__ import annotations

import argparse
import json
import secrets
import sys
from typing import Any, Sequence

from .adapters.crypto.encrypted_token_maker import EncryptedTokenMaker
from .config import parse_duration, settings_from_env
from .domain.constants import KEY_SIZE
from .domain.entities import TokenPayload
from .domain.exceptions import AuthenticationError, TokenExpiredError


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="pkg-tokenauth",
        description="Generate keys, issue and inspect access tokens",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser(
        "generate-key",
        help=f"Print a random {KEY_SIZE}-character key for TOKEN_SYMMETRIC_KEY.",
    )

    issue = sub.add_parser(
        "issue",
        help="Issue a token with the key from TOKEN_SYMMETRIC_KEY.",
    )
    issue.add_argument("--subject", "-s", required=True, help="Identity the token asserts.")
    issue.add_argument(
        "--ttl",
        help="Token lifetime, e.g. 15m or 24h (default: ACCESS_TOKEN_DURATION).",
    )

    inspect = sub.add_parser(
        "inspect",
        help="Verify a token with the key from TOKEN_SYMMETRIC_KEY and print its payload.",
    )
    inspect.add_argument("token")

    return parser.parse_args(args=argv)


def _payload_dict(payload: TokenPayload) -> dict[str, Any]:
    return {
        "id": str(payload.id),
        "subject": payload.subject,
        "issued_at": payload.issued_at.isoformat(),
        "expires_at": payload.expires_at.isoformat(),
    }


def _run(args: argparse.Namespace) -> dict[str, Any]:
    if args.command == "generate-key":
        # token_urlsafe(24) -> 32 url-safe characters
        return {"key": secrets.token_urlsafe(KEY_SIZE * 3 // 4)}

    settings = settings_from_env()
    maker = EncryptedTokenMaker(settings.token_symmetric_key)

    if args.command == "issue":
        ttl = parse_duration(args.ttl) if args.ttl else settings.access_token_duration
        issued = maker.create_token(args.subject, ttl)
        return {"token": issued.token, "payload": _payload_dict(issued.payload)}

    try:
        payload = maker.verify_token(args.token)
    except TokenExpiredError as exc:
        raise AuthenticationError(
            f"token has expired (subject {exc.payload.subject!r})" if exc.payload else str(exc)
        ) from exc
    return {"payload": _payload_dict(payload)}


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    try:
        summary = _run(args)
    except Exception as exc:  # noqa: BLE001
        json.dump({"ok": False, "error": str(exc)}, sys.stdout, indent=2)
        sys.stdout.write("\n")
        return 1

    json.dump({"ok": True, **summary}, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
