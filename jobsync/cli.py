from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict

from jobsync.application.session import JobViewSession
from jobsync.core.config import get_settings
from jobsync.core.logging import configure_logging
from jobsync.dependencies import build_detail_view, build_job_api, session_boundary
from jobsync.presentation.boundary import RenderFault

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Follow a media job and print its detail view.")
    parser.add_argument("job_id", help="Job identifier as used by GET /videos/{id}")
    parser.add_argument("--interval", type=float, default=None, help="Poll interval in seconds.")
    parser.add_argument("--once", action="store_true", help="Print the first snapshot and exit.")
    return parser.parse_args(argv)


def _render(session: JobViewSession) -> str:
    result = session_boundary(session).render()
    if isinstance(result, RenderFault):
        return json.dumps({"fault": asdict(result)}, ensure_ascii=False)
    return json.dumps(result.to_dict(), ensure_ascii=False, indent=2)


async def _watch(args: argparse.Namespace) -> int:
    api = build_job_api()
    view = build_detail_view(api=api)
    if args.interval is not None:
        view.interval_seconds = max(0.1, args.interval)

    changed = asyncio.Event()
    session = view.show(args.job_id)
    session.add_listener(lambda _s: changed.set())
    try:
        last_printed = None
        while True:
            await changed.wait()
            changed.clear()
            rendered = _render(session)
            if rendered != last_printed:
                print(rendered, flush=True)
                last_printed = rendered
            if args.once:
                return 0
    finally:
        await view.unmount()
        await api.aclose()


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    configure_logging(get_settings().log_level)
    try:
        return asyncio.run(_watch(args))
    except KeyboardInterrupt:
        logger.info("watch_interrupted job_id=%s", args.job_id)
        return 130


if __name__ == "__main__":
    sys.exit(main())
