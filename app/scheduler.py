# app/scheduler.py
from apscheduler.schedulers.background import BackgroundScheduler
from .services import run_search_alerts
from .utils import env_int, logger

def build_scheduler() -> BackgroundScheduler:
    scheduler = BackgroundScheduler()
    scheduler.add_job(
        run_search_alerts, 'interval',
        minutes=env_int("ALERT_INTERVAL_MINUTES", 60),
        id="search_alerts", replace_existing=True,
    )
    return scheduler

def start_scheduler() -> BackgroundScheduler:
    scheduler = build_scheduler()
    scheduler.start()
    logger.info("Scheduler started")
    return scheduler
