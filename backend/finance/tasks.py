import logging

from celery import shared_task

from restaurants.managers import restaurant_context
from restaurants.models import Restaurant

from .services import FinancialService

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def materialize_recurring_transactions(self, restaurant_id=None):
    """
    Periodic task: materialize upcoming occurrences of recurring bills/incomes.

    Runs for one restaurant when restaurant_id is given, otherwise for every
    active restaurant. A failure for one restaurant does not stop the others.

    Returns:
        dict: generated count per restaurant slug
    """
    restaurants = Restaurant.objects.filter(is_active=True)
    if restaurant_id:
        restaurants = restaurants.filter(id=restaurant_id)

    results = {}
    failed = []
    for restaurant in restaurants:
        try:
            with restaurant_context(restaurant):
                generated = FinancialService.materialize_recurring(restaurant)
            results[restaurant.slug] = len(generated)
        except Exception as exc:
            logger.error(
                f"Recurring materialization failed for restaurant {restaurant.slug}: {exc}",
                exc_info=True,
            )
            failed.append(restaurant.slug)

    if failed and restaurant_id:
        raise self.retry(exc=RuntimeError(f"Recurring materialization failed for {restaurant_id}"))

    return {"status": "completed" if not failed else "partial", "generated": results, "failed": failed}
