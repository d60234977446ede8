"""
Post creation and handoff of the created post to the feed
"""
from typing import List, Optional
import logging

from .formatting import format_feed_item
from .location import LocationResolver, parse_coordinates
from ..domain.gateways import IHandoffStore, IRemoteDataGateway
from ..domain.models import (
    CURRENT_LOCATION,
    FeedItem,
    MediaFile,
    UNKNOWN_PLACE,
)
from ..errors import PostCreationError, ValidationError

logger = logging.getLogger(__name__)


class PostComposer:
    """Creates posts and hands the formatted result to the next feed view"""

    def __init__(
        self,
        gateway: IRemoteDataGateway,
        resolver: LocationResolver,
        handoff: IHandoffStore,
        media_base_url: Optional[str] = None
    ):
        self.gateway = gateway
        self.resolver = resolver
        self.handoff = handoff
        self.media_base_url = media_base_url

    async def create_post(
        self,
        content: str,
        latitude: float,
        longitude: float,
        media: Optional[List[MediaFile]] = None
    ) -> FeedItem:
        """
        Publish a post at the given position

        Returns:
            The created post formatted as a feed item

        Raises:
            ValidationError: empty content or non-numeric coordinates
            PostCreationError: the API did not accept the post
        """
        text = (content or "").strip()
        if not text:
            raise ValidationError("Post content cannot be empty")

        position = parse_coordinates(latitude, longitude)
        if position is None:
            raise ValidationError("Invalid coordinates provided")

        response = await self.gateway.create_post(text, position[0], position[1], media)
        if not isinstance(response, dict) or response.get("status") != "success":
            raise PostCreationError("Post creation failed")

        record = response.get("record") or {}
        location = response.get("location") or {}
        distance = record.get("city") or location.get("city") or CURRENT_LOCATION

        if distance in (UNKNOWN_PLACE, CURRENT_LOCATION):
            distance = await self.resolver.resolve_place_name(*position)

        manage = record.get("manage")
        item = format_feed_item(
            record,
            distance,
            coordinates=position,
            is_user_post=isinstance(manage, dict) and manage.get("delete") is True,
            media_base_url=self.media_base_url,
        )

        if not await self.handoff.put(item):
            logger.error(f"Could not hand off new post {item.id}")
        logger.info(f"Created post {item.id}")
        return item

    async def take_new_post(self) -> Optional[FeedItem]:
        """The post created since the last call, if any"""
        return await self.handoff.take()

    async def discard_new_post(self):
        """Drop an orphaned handoff value"""
        await self.handoff.clear()
