from celery import Celery

from mechanic_backend.core.config import settings

celery_app = Celery(
    "mechanic_on_demand_worker",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["mechanic_backend.worker.jobs"],
)

celery_app.conf.update(
    task_track_started=True,
    timezone="UTC",
    enable_utc=True,
    worker_hijack_root_logger=False,
)
