"""Snoozed PR record as stored in the snooze blob."""

from datetime import datetime, timedelta
from enum import Enum

from pydantic import BaseModel, Field


class SnoozeDuration(str, Enum):
    """How long a PR stays hidden."""

    ONE_DAY = "one_day"
    ONE_WEEK = "one_week"
    ONE_MONTH = "one_month"

    @property
    def seconds(self) -> int:
        return _DURATION_SECONDS[self]

    @property
    def interval(self) -> timedelta:
        return timedelta(seconds=self.seconds)

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DURATION_SECONDS = {
    SnoozeDuration.ONE_DAY: 86_400,
    SnoozeDuration.ONE_WEEK: 604_800,
    SnoozeDuration.ONE_MONTH: 2_592_000,  # 30 days
}

_DISPLAY_NAMES = {
    SnoozeDuration.ONE_DAY: "1 Day",
    SnoozeDuration.ONE_WEEK: "1 Week",
    SnoozeDuration.ONE_MONTH: "1 Month",
}


class SnoozeEntry(BaseModel):
    """A PR hidden from the visible buckets until expires_at."""

    pr_id: str = Field(..., description="Snoozed PR node id (identity key)")
    pr_title: str
    pr_repository: str
    pr_number: int
    pr_url: str
    snoozed_at: datetime = Field(..., description="UTC timestamp when the PR was snoozed")
    duration: SnoozeDuration

    model_config = {"frozen": True}

    @property
    def expires_at(self) -> datetime:
        return self.snoozed_at + self.duration.interval

    def is_expired_at(self, now: datetime) -> bool:
        return now >= self.expires_at
