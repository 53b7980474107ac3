import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from examcore.core.config import settings
from examcore.core.database import SessionLocal
from examcore.services.certificate import certificate_service
from examcore.services.test_session import test_session_service

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


def sweep_session_timeouts():
    db = SessionLocal()
    try:
        transitioned = test_session_service.sweep_timeouts(db)
        if transitioned:
            logger.info(f"Timeout sweep: {transitioned} session(s) expired or finalized")
    except Exception as e:
        logger.error(f"Error sweeping session timeouts: {e}")
    finally:
        db.close()


def expire_certificates():
    db = SessionLocal()
    try:
        expired = certificate_service.expire_due(db)
        logger.info(f"Certificate expiry: {expired} certificate(s) expired")
    except Exception as e:
        logger.error(f"Error expiring certificates: {e}")
    finally:
        db.close()


def start_scheduler():
    if settings.TESTING or not settings.SCHEDULER_ENABLED:
        logger.info("Scheduler disabled")
        return

    if not scheduler.running:
        scheduler.add_job(
            sweep_session_timeouts,
            'interval',
            seconds=settings.TIMEOUT_SWEEP_INTERVAL_SECONDS,
            id='session_timeout_sweep',
            name='Expire Timed Out Test Sessions',
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )
        scheduler.add_job(
            expire_certificates,
            'cron',
            hour=settings.CERTIFICATE_EXPIRY_SWEEP_HOUR,
            minute=0,
            id='certificate_expiry',
            name='Expire Lapsed Certificates',
            replace_existing=True
        )
        scheduler.start()
        logger.info("Scheduler started with session timeout and certificate expiry jobs")


def stop_scheduler():
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Scheduler stopped")
