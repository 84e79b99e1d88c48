"""
Console watcher for due-soon notifications.

Logs in with the given credentials, then prints the notification list every
time the poller refreshes it. `--once` runs a single cycle and exits.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from datetime import datetime
from typing import Sequence

from .client import TaskhubClient
from .config import settings
from .errors import TaskhubError
from .logging_utils import setup_logging
from .notifications import Notification, NotificationPoller, due_label

logger = logging.getLogger(__name__)


def render(notifications: Sequence[Notification], now: datetime | None = None) -> str:
    if not notifications:
        return "No tasks due soon."
    now = now or datetime.now()
    lines = [f"{len(notifications)} task(s) due soon:"]
    for n in notifications:
        lines.append(f"  - {n.message} ({due_label(n.due_date, now)})")
    return "\n".join(lines)


async def watch(poller: NotificationPoller, *, once: bool = False, out=sys.stdout) -> int:
    while True:
        ok = await poller.refresh()
        if ok:
            print(render(poller.notifications), file=out, flush=True)
        if once:
            return 0 if ok else 1
        await asyncio.sleep(poller.interval_seconds)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="taskhub-watch", description=__doc__.strip().splitlines()[0])
    p.add_argument("--base-url", default=settings.API_BASE_URL)
    p.add_argument("--email", required=True)
    p.add_argument(
        "--password",
        default=os.environ.get("TASKHUB_PASSWORD"),
        help="defaults to $TASKHUB_PASSWORD",
    )
    p.add_argument("--interval", type=float, default=settings.NOTIFICATION_POLL_SECONDS)
    p.add_argument("--once", action="store_true", help="run one cycle and exit")
    return p


def main(argv: Sequence[str] | None = None, *, client: TaskhubClient | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(settings.LOG_LEVEL)
    if not args.password:
        print("error: --password or $TASKHUB_PASSWORD is required", file=sys.stderr)
        return 2

    client = client or TaskhubClient(args.base_url)
    try:
        client.login(args.email, args.password)
    except TaskhubError as exc:
        print(f"error: login failed: {exc.message}", file=sys.stderr)
        client.close()
        return 1

    poller = client.notification_poller(args.interval)
    try:
        return asyncio.run(watch(poller, once=args.once))
    except KeyboardInterrupt:
        logger.info("stopped")
        return 0
    finally:
        client.close()


if __name__ == "__main__":
    sys.exit(main())
