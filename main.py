#!/usr/bin/env python
"""CLI for the studio assistant."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from pydantic import BaseModel, ValidationError, field_validator

from studio_assistant.config import create_from_config, get_default_config_path, load_config
from studio_assistant.data import ChatRequest, ChatResponse

logger = logging.getLogger(__name__)


class CLIArgs(BaseModel):
    """Validated CLI arguments."""

    query: str
    config: Path
    session: str | None = None
    previous_query: str | None = None
    log: bool = False
    log_dir: str = "logs"

    @field_validator("config")
    @classmethod
    def config_must_exist(cls, v: Path) -> Path:
        if not v.exists():
            raise ValueError(f"Config file not found: {v}")
        return v


def print_response(response: ChatResponse) -> None:
    print(f"\n[{response.type}] confidence {response.confidence:.2f}\n")
    print(response.answer)
    if response.options:
        print("\nOptions:")
        for i, option in enumerate(response.options, 1):
            print(f"  {i}. {option.text}")
    structured = response.structured
    for event in structured.events:
        logger.info(f"- {event['title']} ({event['start']}) {event['url']}")
    for article in structured.articles:
        logger.info(f"- {article['title']} {article['url']}")
    for pill in structured.pills:
        logger.info(f"  -> {pill['label']}: {pill['url']}")


async def run(args: CLIArgs) -> ChatResponse:
    """Answer one query with the given configuration.

    Args:
        args: Validated CLI arguments.
    """
    try:
        request = ChatRequest(
            query=args.query, session_id=args.session, previous_query=args.previous_query
        )
    except ValidationError as e:
        logger.error(f"Rejected query: {e.errors()[0]['msg']}")
        response = ChatResponse.rejected("Please enter a question.")
        print_response(response)
        return response

    config = load_config(args.config)
    pipeline, turn_logger = create_from_config(
        config,
        log_override=args.log if args.log else None,
        log_dir_override=args.log_dir if args.log_dir != "logs" else None,
    )

    logger.info(f"Answering: {args.query}")
    logger.info(f"Config: {args.config}")

    response = await pipeline.answer(request)
    print_response(response)

    if turn_logger and turn_logger.last_log_path:
        logger.info(f"\nInteraction logged to: {turn_logger.last_log_path}")
    return response


def main() -> None:
    """Entry point for the CLI."""
    parser = argparse.ArgumentParser(description="Ask the studio assistant a question.")
    parser.add_argument(
        "query",
        help="Question to answer",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to YAML config file (default: configs/default.yaml)",
    )
    parser.add_argument(
        "--session",
        "-s",
        type=str,
        default=None,
        help="Session id, to continue a clarification dialogue",
    )
    parser.add_argument(
        "--previous-query",
        type=str,
        default=None,
        help="The query asked in the previous turn",
    )
    parser.add_argument(
        "--log",
        action="store_true",
        default=False,
        help="Append the turn to the interaction log",
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        default="logs",
        help="Directory for the interaction log (default: logs/)",
    )

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    ns = parser.parse_args()
    config_path: Path = ns.config if ns.config else get_default_config_path()

    try:
        args = CLIArgs(
            query=ns.query,
            config=config_path,
            session=ns.session,
            previous_query=ns.previous_query,
            log=ns.log,
            log_dir=ns.log_dir,
        )
    except Exception as e:
        logger.error(str(e))
        sys.exit(1)

    try:
        response = asyncio.run(run(args))
    except KeyboardInterrupt:
        sys.exit(130)
    if not response.ok:
        sys.exit(2)


if __name__ == "__main__":
    main()
