"""
Worker loop that drains background signed-URL refresh jobs.

When Redis is configured, listings push near-expiry images onto the refresh
queue instead of re-signing them in the API process; this worker signs the
new URLs and stores them.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from snapper.dependencies import get_queue_client, get_refresher
from snapper.queue import RefreshQueue
from snapper.refresher import PointerRefresher

logger = logging.getLogger(__name__)


def process_next(
    *,
    refresher: Optional[PointerRefresher] = None,
    queue: Optional[RefreshQueue] = None,
    block: bool = True,
    timeout: Optional[int] = None,
) -> bool:
    """
    Pop and run one refresh job. Returns True if a job was run.
    """
    refresher = refresher or get_refresher()
    queue = queue or get_queue_client()

    job = queue.dequeue(block=block, timeout=timeout)
    if job is None:
        return False

    if refresher.refresh(job.image_id, job.validity) is None:
        logger.warning("Refresh produced no URL for image %s", job.image_id)
    return True


def run_loop(poll_interval_seconds: float = 2.0) -> None:
    """
    Block on the queue forever. Run one per host under systemd/supervisor.
    """
    refresher = get_refresher()
    queue = get_queue_client()
    while True:
        try:
            processed = process_next(
                refresher=refresher,
                queue=queue,
                block=True,
                timeout=int(poll_interval_seconds),
            )
        except Exception:
            logger.exception("Refresh job failed")
            processed = True
        if not processed:
            time.sleep(poll_interval_seconds)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    run_loop()
