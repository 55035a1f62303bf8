"""Command-line interface for the reading aids.

WHY: The text tools are useful straight from a terminal (simplify a
paragraph, check a sentence), and the read-aloud highlighter and break
timer can be tried without the mobile app.

HOW: argparse subcommands. Text commands print their result to stdout.
``read`` and ``break`` run the real state machines on an AsyncioScheduler
inside asyncio.run() and render progress to stderr. ``serve`` starts the
FastAPI app with uvicorn.

RULES:
- Result text goes to stdout; status and progress go to stderr
- Text is taken from the positional argument, or stdin when it is "-"
  or omitted
- --rules loads a custom rule table for simplify/check/correct
- Errors print "Error: ..." to stderr and exit with status 1;
  Ctrl-C exits with 130 after the state machines are torn down
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from reading_aid.config import (
    DEFAULT_BREAK_DURATION_MINUTES,
    DEFAULT_READING_RATE,
    RULES_PATH,
    clamp_rate,
)
from reading_aid.core.break_timer import BreakTimer, format_countdown
from reading_aid.core.errors import ReadingAidError
from reading_aid.core.lexical import LexicalEngine
from reading_aid.core.playback import PlaybackSynchronizer, highlight_interval
from reading_aid.core.scheduler import AsyncioScheduler
from reading_aid.core.tokenizer import Token, tokenize


def _status(msg: str) -> None:
    """Print a status message to stderr."""
    print(msg, file=sys.stderr, flush=True)


def _read_text(value: Optional[str]) -> str:
    if value is None or value == "-":
        return sys.stdin.read()
    return value


def _engine(args: argparse.Namespace) -> LexicalEngine:
    rules = args.rules or RULES_PATH
    return LexicalEngine.from_file(rules) if rules else LexicalEngine()


def render_highlight(tokens: List[Token], index: int) -> str:
    """Join tokens with the one at ``index`` wrapped in brackets."""
    return " ".join(
        "[{}]".format(t.text) if t.index == index else t.text for t in tokens
    )


# ---------------------------------------------------------------------------
# Text commands
# ---------------------------------------------------------------------------


def _cmd_simplify(args: argparse.Namespace) -> int:
    print(_engine(args).simplify(_read_text(args.text)))
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    errors = _engine(args).detect_misspellings(_read_text(args.text))
    if not errors:
        _status("No spelling errors found.")
        return 0
    for error in errors:
        print("{}\t{}\t{}".format(error.position, error.word, ", ".join(error.suggestions)))
    _status("{} spelling error(s) found.".format(len(errors)))
    return 0


def _cmd_correct(args: argparse.Namespace) -> int:
    engine = _engine(args)
    text = _read_text(args.text)
    errors = engine.detect_misspellings(text)
    print(engine.auto_correct_all(text, errors))
    _status("Corrected {} error(s).".format(len(errors)))
    return 0


# ---------------------------------------------------------------------------
# Timed commands
# ---------------------------------------------------------------------------


async def _run_read(text: str, rate: float) -> None:
    loop = asyncio.get_running_loop()
    done = loop.create_future()
    tokens = tokenize(text)

    def on_tick(index: int) -> None:
        _status(render_highlight(tokens, index))

    def on_complete() -> None:
        if not done.done():
            done.set_result(None)

    with PlaybackSynchronizer(
        AsyncioScheduler(loop), on_tick=on_tick, on_complete=on_complete
    ) as playback:
        if not playback.start(len(tokens), rate, text=text):
            _status("Nothing to read.")
            return
        await done


def _cmd_read(args: argparse.Namespace) -> int:
    rate = clamp_rate(args.rate)
    text = _read_text(args.text)
    _status("Reading at rate {:.2f} ({:.2f}s per word)".format(rate, highlight_interval(rate)))
    asyncio.run(_run_read(text, rate))
    _status("Done.")
    return 0


async def _run_break(minutes: int) -> None:
    loop = asyncio.get_running_loop()
    done = loop.create_future()

    def on_finished() -> None:
        if not done.done():
            done.set_result(None)

    with BreakTimer(
        AsyncioScheduler(loop),
        break_duration_minutes=minutes,
        on_tick=lambda remaining: _status(format_countdown(remaining)),
        on_finished=on_finished,
    ) as timer:
        timer.trigger()
        timer.take_break()
        _status(format_countdown(timer.remaining_seconds))
        await done


def _cmd_break(args: argparse.Namespace) -> int:
    _status("Break time. Relax your eyes and mind.")
    asyncio.run(_run_break(args.minutes))
    _status("Break finished. Welcome back!")
    return 0


def _cmd_serve(args: argparse.Namespace) -> int:
    from reading_aid.server.app import run_api

    run_api(host=args.host, port=args.port)
    return 0


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable; tests can inspect the parser without running anything.
    """
    parser = argparse.ArgumentParser(
        prog="reading_aid",
        description="Reading aids for dyslexic readers: simplify text, fix "
                    "common misspellings, highlight words while reading, "
                    "and take timed breaks.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log debug output to stderr.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    text_help = "Text to process, or '-' (default) to read stdin."

    simplify = sub.add_parser("simplify", help="Rewrite text with simpler words.")
    simplify.add_argument("text", nargs="?", default=None, help=text_help)
    simplify.set_defaults(handler=_cmd_simplify)

    check = sub.add_parser("check", help="List known misspellings with suggestions.")
    check.add_argument("text", nargs="?", default=None, help=text_help)
    check.set_defaults(handler=_cmd_check)

    correct = sub.add_parser("correct", help="Replace misspellings with their top suggestion.")
    correct.add_argument("text", nargs="?", default=None, help=text_help)
    correct.set_defaults(handler=_cmd_correct)

    for command in (simplify, check, correct):
        command.add_argument(
            "--rules",
            default=None,
            help="Path to a JSON rule table (default: built-in dictionaries).",
        )

    read = sub.add_parser("read", help="Highlight words one at a time at reading pace.")
    read.add_argument("text", nargs="?", default=None, help=text_help)
    read.add_argument(
        "--rate",
        type=float,
        default=DEFAULT_READING_RATE,
        help="Reading rate, 0.3-1.5 (default: %(default)s).",
    )
    read.set_defaults(handler=_cmd_read)

    brk = sub.add_parser("break", help="Run a break countdown.")
    brk.add_argument(
        "--minutes",
        type=int,
        default=DEFAULT_BREAK_DURATION_MINUTES,
        help="Break length in minutes (default: %(default)s).",
    )
    brk.set_defaults(handler=_cmd_break)

    serve = sub.add_parser("serve", help="Run the HTTP API.")
    serve.add_argument("--host", default="127.0.0.1", help="Bind address (default: %(default)s).")
    serve.add_argument("--port", type=int, default=8000, help="Port (default: %(default)s).")
    serve.set_defaults(handler=_cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``python -m reading_aid``.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
        )

    try:
        code = args.handler(args)
    except KeyboardInterrupt:
        _status("\nCancelled by user.")
        sys.exit(130)
    except (ReadingAidError, ValueError) as e:
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)
    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
