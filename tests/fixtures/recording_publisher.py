from typing import List

from codeshare.application.event_publisher import EventPublisher
from codeshare.domain.events import DomainEvent


class RecordingEventPublisher(EventPublisher):
    """EventPublisher that also keeps every published event."""

    def __init__(self):
        super().__init__()
        self.events: List[DomainEvent] = []

    def publish(self, event: DomainEvent) -> None:
        self.events.append(event)
        super().publish(event)

    def of_type(self, event_type) -> List[DomainEvent]:
        return [event for event in self.events if isinstance(event, event_type)]
