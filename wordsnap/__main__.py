"""CLI entry point for wordsnap.

Usage:
  python -m wordsnap serve [--port PORT] [--host HOST]
  python -m wordsnap stop
  python -m wordsnap restart [--port PORT] [--host HOST]
  python -m wordsnap status
  python -m wordsnap extract IMAGE [--no-translate] [--no-image-meaning]
"""
from __future__ import annotations

import argparse
import asyncio
import mimetypes
import os
import signal
import sys
import time
from pathlib import Path

from wordsnap.config import Settings, load_settings
from wordsnap.errors import WordSnapError
from wordsnap.extractor import analyze_image
from wordsnap.layout import SHEET_HEADER, sheet_rows
from wordsnap.reconciler import reconcile
from wordsnap.translator import MeaningTranslator


class ServerPid:
    """The running server's PID, kept in a file beside the package."""

    def __init__(self, path: Path):
        self.path = path

    def running(self) -> int | None:
        """PID of a live server; a stale file is removed."""
        try:
            pid = int(self.path.read_text().strip())
            os.kill(pid, 0)
        except (FileNotFoundError, ValueError, ProcessLookupError, PermissionError):
            self.clear()
            return None
        return pid

    def claim(self) -> None:
        self.path.write_text(str(os.getpid()))

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


SERVER_PID = ServerPid(Path(__file__).resolve().parent.parent / ".server.pid")


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    pid = SERVER_PID.running()
    if pid is not None:
        print(f"WordSnap already running (PID {pid}). Use 'restart' or 'stop' first.")
        return 1
    SERVER_PID.claim()
    print(f"WordSnap listening on http://{args.host}:{args.port} (Ctrl+C to stop)")
    try:
        uvicorn.run("wordsnap.app:app", host=args.host, port=args.port,
                    timeout_graceful_shutdown=5)
    finally:
        SERVER_PID.clear()
    return 0


def _stop(args: argparse.Namespace | None = None) -> int:
    pid = SERVER_PID.running()
    if pid is None:
        print("WordSnap is not running.")
        return 0
    try:
        os.kill(pid, signal.SIGTERM)
    except ProcessLookupError:
        pass
    SERVER_PID.clear()
    print(f"Stopped WordSnap (PID {pid}).")
    return 0


def _status(args: argparse.Namespace) -> int:
    pid = SERVER_PID.running()
    print("WordSnap is not running." if pid is None else f"WordSnap is running (PID {pid}).")
    return 0


def _restart(args: argparse.Namespace) -> int:
    _stop()
    time.sleep(1)
    return _serve(args)


async def run_analysis(llm, image: bytes, mime: str, settings: Settings,
                       translate: bool = True, image_has_meaning: bool = True):
    """Extract and reconcile one sheet, the same way ``/api/analyze`` does."""
    result = await analyze_image(llm, image, mime, settings=settings)
    translator = None
    if translate and not image_has_meaning:
        translator = MeaningTranslator.from_settings(llm, settings)
    rows = await reconcile(result, translate, image_has_meaning, translator)
    return result, rows


def _extract(args: argparse.Namespace) -> int:
    from wordsnap.providers.factory import build_provider

    path = Path(args.image)
    if not path.exists():
        print(f"Not found: {path}")
        return 1

    settings = load_settings()
    try:
        llm = build_provider(settings)
    except ValueError as e:
        print(e)
        return 1
    mime = mimetypes.guess_type(path.name)[0] or "image/jpeg"

    print(f"Extracting {path.name} using {llm.name()}...")
    try:
        result, rows = asyncio.run(run_analysis(
            llm, path.read_bytes(), mime, settings,
            translate=args.translate, image_has_meaning=args.image_has_meaning,
        ))
    except WordSnapError as e:
        print(f"Failed: {e}")
        return 1

    print(f"\nFound {len(result)} words\n")
    print(" | ".join(SHEET_HEADER))
    for row in sheet_rows(rows, settings.sheet_rows):
        if row.left is None and row.right is None:
            break
        print(" | ".join(str(c) for c in row.to_list()))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="wordsnap", description="Vocabulary sheet extraction")
    sub = parser.add_subparsers(dest="command")

    for name, func in (("serve", _serve), ("restart", _restart)):
        p = sub.add_parser(name)
        p.add_argument("--port", type=int, default=8765)
        p.add_argument("--host", default="127.0.0.1")
        p.set_defaults(func=func)
    sub.add_parser("stop").set_defaults(func=_stop)
    sub.add_parser("status").set_defaults(func=_status)

    p = sub.add_parser("extract", help="Extract words from an image and print the sheet")
    p.add_argument("image")
    p.add_argument("--no-translate", dest="translate", action="store_false")
    p.add_argument("--no-image-meaning", dest="image_has_meaning", action="store_false")
    p.set_defaults(func=_extract)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        # Bare invocation starts the server
        args = parser.parse_args(["serve"])
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
