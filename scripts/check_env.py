"""Pre-flight check for the Spotify settings of a deployment.

Run it before starting the server. It loads an env file and builds
``AppSettings`` from it. It exits non-zero when the Spotify client id,
client secret or redirect URI is missing, or when a value is malformed. The
``record`` and ``verify`` commands also pin a SHA-256 of the file so later
edits show up.

Example usages::

    python -m scripts.check_env check --env-file .env
    python -m scripts.check_env record --env-file .env --hash-file .env.sha256
    python -m scripts.check_env verify --env-file .env --hash-file .env.sha256
"""

from __future__ import annotations

import argparse
import hashlib
import sys
from pathlib import Path

from pydantic import ValidationError

from songtracker.core.config import AppSettings, _load_env_file
from songtracker.core.errors import ConfigurationError

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_CHECKSUM_ERROR = 3
EXIT_RUNTIME_ERROR = 5


def _file_digest(path: Path) -> str:
    return hashlib.sha256(path.read_bytes()).hexdigest()


def load_settings(env_file: Path) -> AppSettings:
    """Build settings from ``env_file``; raise when Spotify values are absent."""
    _load_env_file(str(env_file))
    settings = AppSettings()
    missing = settings.spotify.missing_fields()
    if missing:
        raise ConfigurationError("Spotify configuration is incomplete.", missing=missing)
    return settings


def _summarize(settings: AppSettings) -> None:
    spotify = settings.spotify
    print(f"environment:    {settings.environment}")
    print(f"redirect URI:   {spotify.redirect_uri}")
    print(f"scopes:         {' '.join(spotify.scope_list)}")
    print(
        "token secret:   "
        + ("set" if settings.security.token_encryption_secret else "derived from client secret")
    )


def _cmd_check(args: argparse.Namespace) -> int:
    return EXIT_OK


def _cmd_record(args: argparse.Namespace) -> int:
    digest = _file_digest(args.env_file)
    args.hash_file.write_text(f"{digest}\n", encoding="utf-8")
    print(f"Baseline {digest} written to {args.hash_file}")
    return EXIT_OK


def _cmd_verify(args: argparse.Namespace) -> int:
    hash_file: Path = args.hash_file
    if not hash_file.exists():
        print(
            f"No baseline at {hash_file}; run 'record' first.",
            file=sys.stderr,
        )
        return EXIT_RUNTIME_ERROR

    baseline = hash_file.read_text(encoding="utf-8").strip()
    current = _file_digest(args.env_file)
    if baseline != current:
        print(
            f"{args.env_file} changed since the baseline was recorded\n"
            f"  baseline: {baseline}\n"
            f"  current:  {current}",
            file=sys.stderr,
        )
        return EXIT_CHECKSUM_ERROR

    print(f"{args.env_file} matches its baseline.")
    return EXIT_OK


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="check_env", description=__doc__.splitlines()[0])
    commands = parser.add_subparsers(dest="command", required=True)

    for name, handler, summary, needs_hash in (
        ("check", _cmd_check, "validate settings only", False),
        ("record", _cmd_record, "validate settings and write the checksum baseline", True),
        ("verify", _cmd_verify, "validate settings and compare against the baseline", True),
    ):
        command = commands.add_parser(name, help=summary)
        command.add_argument("--env-file", type=Path, default=Path(".env"))
        if needs_hash:
            command.add_argument("--hash-file", type=Path, required=True)
        command.add_argument(
            "--show", action="store_true", help="print the non-secret settings that were loaded"
        )
        command.set_defaults(handler=handler)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = _parser().parse_args(argv)

    if not args.env_file.exists():
        print(f"{args.env_file} not found.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        settings = load_settings(args.env_file)
    except ConfigurationError as exc:
        print(f"{exc} Set: {', '.join(exc.missing)}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR
    except ValidationError as exc:
        print(f"Invalid settings in {args.env_file}:\n{exc}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    if args.show:
        _summarize(settings)
    return args.handler(args)


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
