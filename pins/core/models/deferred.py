"""DeferredEvaluation model for scheduled target resolution."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field, field_validator


class DeferredEvaluation(BaseModel):
    """A target scheduled to be resolved at or after ``due_date``.

    Only the side effects of the resolution matter; the resolved string is
    discarded. The (target, due_date) pair doubles as the cancellation handle.
    """

    target: str = Field(..., description="Raw target string to resolve later")
    due_date: datetime = Field(..., description="When the target becomes due")

    @field_validator("due_date")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        """Treat naive datetimes as UTC so comparisons are well defined."""
        if v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    def is_due(self, now: datetime) -> bool:
        if now.tzinfo is None:
            now = now.replace(tzinfo=UTC)
        return self.due_date <= now

    def same_as(self, target: str, due_date: datetime) -> bool:
        other = DeferredEvaluation(target=target, due_date=due_date)
        return self.target == other.target and self.due_date == other.due_date
