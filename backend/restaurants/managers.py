from contextlib import contextmanager
from threading import local

from django.db import models

# Thread-local storage for current restaurant
_thread_locals = local()


def set_current_restaurant(restaurant):
    """
    Set the current restaurant for this thread.

    Args:
        restaurant: Restaurant instance or None to clear

    This is called by RestaurantMiddleware and Celery tasks to establish
    restaurant context for the current request/task.
    """
    _thread_locals.restaurant = restaurant


def get_current_restaurant():
    """
    Get the current restaurant for this thread.

    Returns:
        Restaurant instance or None if no restaurant context is set
    """
    return getattr(_thread_locals, "restaurant", None)


@contextmanager
def restaurant_context(restaurant):
    """
    Temporarily switch the restaurant context (Celery tasks, engine entry points).

    The previous context is restored on exit, even if the body raises.
    """
    previous = get_current_restaurant()
    set_current_restaurant(restaurant)
    try:
        yield restaurant
    finally:
        set_current_restaurant(previous)


class RestaurantManager(models.Manager):
    """
    Automatically filters querysets by current restaurant.

    FAILS CLOSED: Returns empty queryset if no restaurant context is set.
    This prevents accidental data leakage across restaurants.

    Usage:
        class Product(models.Model):
            restaurant = models.ForeignKey('restaurants.Restaurant', on_delete=models.CASCADE)

            objects = RestaurantManager()  # Default manager (restaurant-filtered)
            all_objects = models.Manager()  # Bypass filter for engine/admin operations

            class Meta:
                default_manager_name = "all_objects"

    Reverse relations (order.items, session.transactions) go through the
    default manager, so models make all_objects the default: those rows are
    already scoped by their parent, and the engine runs without a request context.
    """

    def get_queryset(self):
        restaurant = get_current_restaurant()

        if restaurant:
            return super().get_queryset().filter(restaurant=restaurant)

        # FAIL CLOSED: Return empty queryset if no restaurant context
        return super().get_queryset().none()
