import argparse
import logging
import os
import sys

from calculator.session import BANNER, PROMPT, Session
from calculator.settings import Settings

LOG_LEVEL_ENV_VAR = "CALCULATOR_LOG_LEVEL"


def main() -> int:
    parser = argparse.ArgumentParser(prog="calculator", description="arithmetic expression evaluator")
    parser.add_argument("--fp", type=int, default=None, help="initial fixed decimal precision")
    parser.add_argument(
        "--log-level",
        default=os.environ.get(LOG_LEVEL_ENV_VAR, "WARNING"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="logging verbosity",
    )
    parser.add_argument("-q", "--quiet", action="store_true", help="don't print initial banner")
    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    settings = Settings.from_env()
    if args.fp is not None:
        if args.fp <= 0:
            parser.error("--fp must be a positive integer")
        settings = settings.with_precision(args.fp)
    session = Session(settings=settings)

    if not args.quiet:
        print(BANNER)
    while True:
        try:
            code = input(PROMPT)
        except (EOFError, KeyboardInterrupt):
            print()
            return 0

        for line in session.handle(code):
            print(line)


if __name__ == "__main__":
    sys.exit(main())
