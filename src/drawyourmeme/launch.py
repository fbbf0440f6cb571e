"""
Mock PumpFun deployment.

No chain interaction happens; launching a token only produces a link in
the shape PumpFun uses.
"""

import asyncio
import logging
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

PUMPFUN_TOKEN_BASE = "https://pump.fun/token"


def generate_pumpfun_link(ticker: str, now: datetime | None = None) -> str:
    """Build the mock deployment link for a ticker at a point in time."""
    now = now or datetime.now(timezone.utc)
    millis = int(now.timestamp() * 1000)
    return f"{PUMPFUN_TOKEN_BASE}/{ticker.lower()}-{millis}"


async def deploy_token(ticker: str, delay_seconds: float = 1.0) -> str:
    """Simulate deployment latency, then return the mock link."""
    if delay_seconds > 0:
        await asyncio.sleep(delay_seconds)
    link = generate_pumpfun_link(ticker)
    logger.info(f"Mock deployment of {ticker} at {link}")
    return link
