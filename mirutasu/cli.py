from __future__ import annotations

import argparse
import logging
from datetime import date
from typing import Optional, Sequence

from .clock import local_today
from .config import get_settings
from .db import init_db, make_engine, make_session_factory
from .game_catalog import seed_game_masters
from .logging_setup import setup_logging
from .recurrence import materialize_recurring_tasks

logger = logging.getLogger(__name__)


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not a YYYY-MM-DD date: {value!r}") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mirutasu", description="Otaku Secretary API server and maintenance")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8787)
    serve.add_argument("--reload", action="store_true", help="auto-reload on code changes (development)")

    sub.add_parser("init-db", help="create database tables")
    sub.add_parser("seed-games", help="insert the built-in game catalog")

    gen = sub.add_parser("generate", help="materialize recurring tasks for every user")
    gen.add_argument("--date", type=_parse_date, default=None, help="local day (YYYY-MM-DD), default today")
    return parser


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "mirutasu.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
        log_config=None,  # keep our handlers
    )
    return 0


def _cmd_init_db(args: argparse.Namespace) -> int:
    init_db(make_engine(get_settings().database_url))
    logger.info("Database initialized")
    return 0


def _cmd_seed_games(args: argparse.Namespace) -> int:
    engine = make_engine(get_settings().database_url)
    init_db(engine)
    with make_session_factory(engine)() as db:
        added = seed_game_masters(db)
    print(f"{added} game(s) added")
    return 0


def _cmd_generate(args: argparse.Namespace) -> int:
    settings = get_settings()
    engine = make_engine(settings.database_url)
    init_db(engine)
    day = args.date or local_today(settings.timezone)
    with make_session_factory(engine)() as db:
        tasks = materialize_recurring_tasks(db, day, settings.timezone)
    print(f"{len(tasks)} task(s) generated for {day.isoformat()}")
    return 0


COMMANDS = {
    "serve": _cmd_serve,
    "init-db": _cmd_init_db,
    "seed-games": _cmd_seed_games,
    "generate": _cmd_generate,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_file)
    return COMMANDS[args.command](args)


if __name__ == "__main__":
    raise SystemExit(main())
