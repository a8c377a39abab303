"""Worker process hosting the user account workflow and its activities."""

from __future__ import annotations

import asyncio
import logging

from temporalio.worker import Worker

from .activities import ApprovalActivities
from .client import connect_client
from .config import get_settings
from .orchestration.workflow import UserAccountWorkflow

logger = logging.getLogger(__name__)


def build_worker(client, task_queue: str) -> Worker:
    """Register the entity workflow and approval activities on ``task_queue``."""
    activities = ApprovalActivities(client)
    return Worker(
        client,
        task_queue=task_queue,
        workflows=[UserAccountWorkflow],
        activities=[activities.verify_approver, activities.send_notifications],
    )


async def main() -> None:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)
    client = await connect_client(settings)
    worker = build_worker(client, settings.task_queue)
    logger.info("worker polling task queue %s", settings.task_queue)
    await worker.run()


if __name__ == "__main__":
    asyncio.run(main())
