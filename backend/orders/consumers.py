import logging

from asgiref.sync import sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer

from restaurants.services import resolve_restaurant

from .services.notification_service import orders_group_name

logger = logging.getLogger(__name__)


class OrderEventsConsumer(AsyncJsonWebsocketConsumer):
    """
    Pushes order_created / order_updated events of one restaurant to the
    connected UI. Events are produced by OrderEventDispatcher after commit.
    """

    async def connect(self):
        ref = self.scope["url_route"]["kwargs"]["restaurant"]
        restaurant = await sync_to_async(resolve_restaurant)(ref)
        if restaurant is None or not restaurant.is_active:
            logger.warning(f"OrderEventsConsumer: rejected connection for restaurant '{ref}'")
            await self.close()
            return

        self.group_name = orders_group_name(restaurant.id)
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()
        logger.info(f"OrderEventsConsumer: joined {self.group_name}")

    async def disconnect(self, close_code):
        group_name = getattr(self, "group_name", None)
        if group_name:
            await self.channel_layer.group_discard(group_name, self.channel_name)

    async def receive_json(self, content, **kwargs):
        # Read-only stream; only keepalives are answered
        if content.get("type") == "ping":
            await self.send_json({"type": "pong"})

    async def order_event(self, event):
        await self.send_json(event["payload"])
