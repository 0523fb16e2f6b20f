#!/usr/bin/env python3
"""Compute the Robotics Narrative Index and append it to history.

This script:
1. Runs every component scorer concurrently
2. Combines them into the weighted composite
3. Persists the score and prints the per-component breakdown
4. Optionally sends the daily briefing and alerts to Telegram

Usage:
    python -m scripts.compute_narrative [--no-news] [--briefing] [--alerts] [--history 30]

Environment:
    NARRATIVE_DATA_DIR, NARRATIVE_DATABASE_URL, GITHUB_TOKEN, NEWSAPI_KEY,
    POLYMARKET_TOKEN_IDS, TELEGRAM_BOT_TOKEN, TELEGRAM_CHAT_ID
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import sys
from pathlib import Path

# Ensure imports work when invoked as a script (e.g., from cron).
_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from narrative.aggregator import AggregationRun  # noqa: E402
from narrative.config import NarrativeConfig  # noqa: E402
from narrative.factory import build_index, build_stores  # noqa: E402
from narrative.notifications import TelegramClient, detect_alerts  # noqa: E402
from narrative.signals.scoring import interpret_score  # noqa: E402
from narrative.storage.history import HistoryStore  # noqa: E402

logger = logging.getLogger("compute_narrative")


def _print_run(run: AggregationRun) -> None:
    score = run.score
    interpretation = interpret_score(score.overall)
    print("=" * 60)
    print(f"Robotics Narrative Index: {score.overall} {interpretation.emoji} {interpretation.label}")
    print(f"Trend: {score.trend}  Confidence: {score.confidence:.0%}")
    print("-" * 60)
    for c in run.composite.contributions:
        print(f"  {c.component.value:<20} {c.score:>3} x {c.weight:.2f} = {c.contribution:6.2f}")
    print("-" * 60)
    print(f"  {run.composite.explanation}")
    if score.signals:
        print()
        print("Top signals:")
        for signal in score.signals:
            print(f"  [{signal.impact:+.1f}] {signal.title}")
    if not run.persisted:
        print()
        print("WARNING: score was not persisted to history")
    print("=" * 60)


def _print_history(history: HistoryStore, days: int) -> None:
    stats = history.stats(days)
    print(f"History ({days}d): {stats.count} scores")
    if stats.count:
        print(
            f"  current={stats.current} min={stats.min} max={stats.max} "
            f"avg={stats.avg} trend={stats.trend}"
        )


async def _run(args: argparse.Namespace, config: NarrativeConfig) -> int:
    stores = build_stores(config)

    if args.history_only:
        _print_history(stores.history, args.history or 30)
        return 0

    telegram: TelegramClient | None = None
    if args.briefing or args.alerts:
        telegram = TelegramClient(config.telegram_bot_token, config.telegram_chat_id)
        if not telegram.configured:
            logger.error("--briefing/--alerts need TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID")
            return 1

    index = build_index(config, stores=stores)
    try:
        run = await index.run()
    finally:
        await index.close()

    _print_run(run)

    if args.history:
        print()
        _print_history(stores.history, args.history)

    ok = True
    if telegram is not None:
        if args.briefing:
            ok = await telegram.send_briefing(run.score, run.previous) and ok
        if args.alerts:
            results = await telegram.send_alerts(detect_alerts(run.score, run.previous))
            ok = all(delivered for _, delivered in results) and ok
    return 0 if ok else 1


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Compute the Robotics Narrative Index")
    parser.add_argument(
        "--no-news",
        action="store_true",
        help="Drop the placeholder news component and renormalize weights",
    )
    parser.add_argument("--briefing", action="store_true", help="Send the daily briefing to Telegram")
    parser.add_argument("--alerts", action="store_true", help="Send change and major-signal alerts to Telegram")
    parser.add_argument(
        "--history",
        type=int,
        default=0,
        metavar="DAYS",
        help="Print history statistics over the trailing DAYS",
    )
    parser.add_argument(
        "--history-only",
        action="store_true",
        help="Only print history statistics; do not compute a new score",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        config = NarrativeConfig.from_env()
    except ValueError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1
    if args.no_news:
        config = dataclasses.replace(config, include_news=False)

    try:
        return asyncio.run(_run(args, config))
    except Exception:
        logger.exception("Narrative index run failed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
