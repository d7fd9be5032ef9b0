"""Scheduler process entry point: python -m pipeline.runner"""
import asyncio
import signal
import os
import logging
from database.connection import DatabaseConnection
from pipeline.automation import AutomationController
from pipeline.worker import AutomationWorker
from shared.errors import ConfigurationError

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def install_signal_handlers(worker: AutomationWorker):
    """Stop the worker gracefully on SIGTERM and SIGINT."""
    loop = asyncio.get_running_loop()

    def signal_handler():
        logger.info("Received shutdown signal")
        asyncio.create_task(worker.stop())

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, signal_handler)


async def main():
    """Main entry point for the scheduler service."""
    worker_id = os.getenv("WORKER_ID", f"scheduler-{os.getpid()}")

    logger.info(f"Starting scheduler with worker ID: {worker_id}")

    try:
        db = await DatabaseConnection.init_mongo()
        redis_client = await DatabaseConnection.init_redis()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return

    controller = AutomationController(db, redis_client)
    worker = AutomationWorker(controller, worker_id)
    install_signal_handlers(worker)

    # Change events are only logged here; fetching goes ahead without them
    monitor = None
    try:
        monitor = await controller.start_realtime_monitoring()
    except Exception as e:
        logger.warning(f"Realtime monitoring unavailable, continuing without it: {e}")

    try:
        await worker.start()
    except Exception as e:
        logger.error(f"Worker error: {e}")
    finally:
        if monitor is not None:
            await monitor.stop()
        await DatabaseConnection.close_connections()
        logger.info("Scheduler shutdown complete")


if __name__ == "__main__":
    asyncio.run(main())
