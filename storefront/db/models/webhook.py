"""Record of external webhook events already handled."""

from datetime import datetime

from sqlalchemy import DateTime, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDPrimaryKeyMixin, generate_repr, utcnow


class ProcessedWebhookEvent(Base, UUIDPrimaryKeyMixin):
    """Deduplication marker for a delivered webhook event.

    Attributes:
        event_id: Provider event ID (e.g. ``evt_...`` for Stripe)
        source: Provider name
        event_type: Provider event type
        processed_at: When the event was claimed
    """

    __tablename__ = "processed_webhook_events"

    event_id: Mapped[str] = mapped_column(String(255), nullable=False)
    source: Mapped[str] = mapped_column(String(50), nullable=False)
    event_type: Mapped[str] = mapped_column(String(255), nullable=False)
    processed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("event_id", "source", name="uq_processed_webhook_events_event_source"),
    )

    def __repr__(self) -> str:
        return generate_repr(self, "event_id", "source", "event_type")
