import uuid

from core_backend.exceptions import NotFound

from .models import Restaurant


def resolve_restaurant(ref):
    """
    Look up a restaurant by instance, UUID or slug. Returns None when nothing matches.
    """
    if ref is None:
        return None
    if isinstance(ref, Restaurant):
        return ref

    ref = str(ref)
    try:
        restaurant_id = uuid.UUID(ref)
    except ValueError:
        return Restaurant.objects.filter(slug=ref).first()
    return Restaurant.objects.filter(id=restaurant_id).first()


def get_restaurant_or_404(ref):
    """Resolve a restaurant by id or slug, raising NotFound when it does not exist."""
    restaurant = resolve_restaurant(ref)
    if restaurant is None:
        raise NotFound("Restaurant", ref)
    return restaurant
