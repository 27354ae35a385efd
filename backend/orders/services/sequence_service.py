from django.utils import timezone

from ..models import OrderSequence


class OrderSequenceService:

    @staticmethod
    def next_daily_number(restaurant, business_date=None):
        """
        Allocate the next daily order number. The counter row stays locked
        until the caller's transaction ends, so numbers are never handed out twice.

        Returns:
            (business_date, number)
        """
        business_date = business_date or timezone.localdate()
        OrderSequence.objects.get_or_create(restaurant=restaurant, business_date=business_date)
        sequence = OrderSequence.objects.select_for_update().get(
            restaurant=restaurant, business_date=business_date
        )
        sequence.last_number += 1
        sequence.save(update_fields=["last_number"])
        return business_date, sequence.last_number
