# streamline/core/scheduler.py
import logging

from apscheduler.schedulers.background import BackgroundScheduler
from sqlalchemy.orm import Session

from streamline.db.session import SessionLocal
from streamline.api.auth.services import purge_expired_sessions
from streamline.api.organizations.services import expire_invitations

logger = logging.getLogger(__name__)

# Initialize the scheduler
scheduler = BackgroundScheduler()


# ---------------------------
# Expire Stale Invitations
# ---------------------------

@scheduler.scheduled_job("interval", hours=1)
def expire_stale_invitations():
    db: Session = SessionLocal()
    try:
        count = expire_invitations(db)
        logger.info("Marked %d invitation(s) as expired", count)
    except Exception:
        db.rollback()
        logger.exception("Error expiring invitations")
    finally:
        db.close()


# ---------------------------
# Purge Expired Sessions
# ---------------------------

@scheduler.scheduled_job("cron", hour=0, minute=0)
def purge_sessions():
    db: Session = SessionLocal()
    try:
        count = purge_expired_sessions(db)
        logger.info("Deleted %d expired session(s)", count)
    except Exception:
        db.rollback()
        logger.exception("Error purging expired sessions")
    finally:
        db.close()


# ---------------------------
# Start Scheduler
# ---------------------------

def start_scheduler():
    if not scheduler.running:
        scheduler.start()
        logger.info("Background scheduler started")


def stop_scheduler():
    if scheduler.running:
        scheduler.shutdown(wait=False)
