from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from . import service
from .config import get_settings
from .models import ApplicationInputs
from .provider import TwilioApplicationProvider
from .state import SessionLocal, init_db, load_state


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="twilio-app", description="Deploy and remove a Twilio Application."
    )
    sub = parser.add_subparsers(dest="command", required=True)

    deploy = sub.add_parser("deploy", help="create or update an application")
    deploy.add_argument("name", help="local name the state is stored under")
    deploy.add_argument("inputs", type=Path, help="JSON file with the desired fields")

    remove = sub.add_parser("remove", help="delete an application")
    remove.add_argument("name")

    show = sub.add_parser("show", help="print the stored state")
    show.add_argument("name")

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    init_db()
    db = SessionLocal()
    try:
        if args.command == "deploy":
            inputs = ApplicationInputs.model_validate(
                json.loads(args.inputs.read_text(encoding="utf-8"))
            )
            result = service.deploy(
                db=db, name=args.name, inputs=inputs, provider=TwilioApplicationProvider()
            )
            print(f"{args.name}: {result.action}")
            print(result.state.model_dump_json(indent=2, exclude_none=True))
            return 0

        if args.command == "remove":
            if not service.remove(db=db, name=args.name, provider=TwilioApplicationProvider()):
                print(f"No application named {args.name!r}", file=sys.stderr)
                return 1
            print(f"{args.name}: removed")
            return 0

        state = load_state(db, args.name)
        if state is None:
            print(f"No application named {args.name!r}", file=sys.stderr)
            return 1
        print(state.model_dump_json(indent=2, exclude_none=True))
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
