from celery import Celery
from haulage.core.config import settings

celery_app = Celery(
    "worker",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_BACKEND,
)
celery_app.conf.task_routes = {"haulage.services.tasks.refresh_fuel_price": {"queue": "fuel"}}
celery_app.conf.beat_schedule = {
    "refresh-fuel-price": {
        "task": "haulage.services.tasks.refresh_fuel_price",
        "schedule": float(settings.FUEL_REFRESH_INTERVAL),
    },
}
celery_app.conf.timezone = settings.TIMEZONE


@celery_app.task(bind=True, max_retries=3)
def refresh_fuel_price(self):
    import asyncio
    from haulage.services.tasks_internal import refresh_fuel_price_async

    try:
        return asyncio.run(refresh_fuel_price_async())
    except Exception as e:
        retry_kwargs = {"countdown": 2 ** self.request.retries}
        raise self.retry(exc=e, **retry_kwargs)
