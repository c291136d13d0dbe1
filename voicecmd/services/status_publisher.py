"""Status publisher for pub/sub status events."""

import logging
from pubsub import pub

from ..models.events import StatusEvent, StatusLevel

logger = logging.getLogger(__name__)


STATUS_TOPIC = "voicecmd.status"


class StatusPublisher:
    """Publishes user-facing status events using pubsub.pub.

    The presentation layer subscribes to the topic and decides how to
    render each event; nothing here talks to the UI directly.
    """

    def __init__(self, topic: str = STATUS_TOPIC):
        """Initialize status publisher.

        Args:
            topic: Pub/sub topic name for status events
        """
        self.topic = topic
        logger.info(f"StatusPublisher initialized with topic: {topic}")

    def publish(self, level: StatusLevel, title: str, message: str) -> StatusEvent:
        """Publish a status event to the pub/sub topic.

        Returns:
            The published event
        """
        event = StatusEvent(level=level, title=title, message=message)
        pub.sendMessage(self.topic, event=event)
        logger.debug(f"Published status [{level.value}] {title}: {message}")
        return event

    def info(self, title: str, message: str) -> StatusEvent:
        return self.publish(StatusLevel.INFO, title, message)

    def success(self, title: str, message: str) -> StatusEvent:
        return self.publish(StatusLevel.SUCCESS, title, message)

    def warning(self, title: str, message: str) -> StatusEvent:
        return self.publish(StatusLevel.WARNING, title, message)

    def error(self, title: str, message: str) -> StatusEvent:
        return self.publish(StatusLevel.ERROR, title, message)
