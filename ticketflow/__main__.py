"""Entry point for: python -m ticketflow "message" --customer-id C-1001

Exit codes: 0 completed, 1 partially completed, 2 invalid action graph.
"""
import argparse
import json
import logging
import sys

from ticketflow.actions import build_support_pipeline
from ticketflow.pipeline.status import COMPLETED, CONFIG_INVALID

EXIT_CODES = {COMPLETED: 0, CONFIG_INVALID: 2}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="ticketflow", description="Triage a support request into a ticket.")
    parser.add_argument("message", help="Free-text support request")
    parser.add_argument("--customer-id", default=None)
    parser.add_argument("--email", default=None)
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [ticketflow] %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    state = {k: v for k, v in (("customer_id", args.customer_id), ("email", args.email)) if v}
    run = build_support_pipeline().run(args.message, state)
    print(json.dumps(run.to_payload(), indent=2))
    return EXIT_CODES.get(run.status, 1)


if __name__ == "__main__":
    sys.exit(main())
