#!/usr/bin/env python3
"""n+1 Flashcard Deck Builder - Main Orchestrator."""

import argparse
import sys

import config
from n1deck.logger import setup_logger
from n1deck.step1_sentences import run_step1
from n1deck.step2_images import run_step2

STEPS = ("sentences", "images", "all")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="n+1 Flashcard Deck Builder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Generate sentences, resuming after the rows already in the CSV
  python main.py --step sentences

  # Generate 20 sentences starting at row 101 of the notes file
  python main.py --step sentences --start 101 --limit 20

  # Render missing images with 8 concurrent jobs
  python main.py --step images --concurrency 8
        """,
    )

    parser.add_argument(
        "--step",
        choices=STEPS,
        default="all",
        help="Which pipeline step to run (default: all)",
    )
    parser.add_argument(
        "--start",
        type=int,
        default=config.START_INDEX,
        help="1-based row to start from. Left at 1, sentences resume after existing rows.",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=config.LIMIT,
        help="Process at most this many rows",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=config.CONCURRENCY,
        help=f"Concurrent image jobs (default: {config.DEFAULT_CONCURRENCY})",
    )
    return parser


def main():
    args = build_parser().parse_args()

    logger = setup_logger(step=args.step)

    concurrency = args.concurrency if args.concurrency and args.concurrency > 0 else config.DEFAULT_CONCURRENCY

    logger.info("=" * 60)
    logger.info("n+1 Flashcard Deck Builder")
    logger.info("=" * 60)
    logger.info(f"Step: {args.step}")
    logger.info(f"Notes: {config.NOTES_PATH}")
    logger.info(f"Output: {config.OUTPUT_PATH}")
    if args.step != "sentences":
        logger.info(f"Images: {config.IMAGES_DIR}")
    logger.info("=" * 60)

    try:
        if args.step in ("sentences", "all"):
            run_step1(start_index=args.start, limit=args.limit)

        if args.step in ("images", "all"):
            run_step2(start_index=args.start, limit=args.limit, concurrency=concurrency)

        logger.info("=" * 60)
        logger.info("Pipeline completed successfully!")
        logger.info("=" * 60)

    except KeyboardInterrupt:
        logger.warning("Pipeline interrupted by user.")
        logger.info("Progress has been saved. Run again to continue.")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Pipeline error: {e}", exc_info=True)
        logger.info("Progress has been saved. Run again to continue.")
        sys.exit(1)


if __name__ == "__main__":
    main()
