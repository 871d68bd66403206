#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Application entrypoint for DailyJournal.

Wires the services, runs their one-time initialization and logs a short
status line. Presentation layers import :func:`dailyjournal.logic.build_services`
instead of this file.
"""
from __future__ import annotations

import asyncio
import logging

from dailyjournal.logic import build_services, configure_logging, load_config

logger = logging.getLogger("dailyjournal")


async def run() -> None:
    cfg = load_config()
    configure_logging(cfg.get("log_level", "INFO"))
    services = build_services(cfg)
    await services.initialize()
    try:
        insights = await services.entries.get_insights()
        logger.info(
            "%d entries, current streak %d, longest streak %d, PIN %s",
            insights.total_entries,
            insights.current_streak,
            insights.longest_streak,
            "set" if services.gate.is_pin_set else "not set",
        )
    finally:
        await services.close()


def main() -> None:
    """Run the startup sequence."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
