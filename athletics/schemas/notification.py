from pydantic import BaseModel, Field
from typing import List


class NotificationPassResult(BaseModel):
    """Counters for one reminder pass"""
    games_in_24_hour_window: int = 0
    games_in_game_day_window: int = 0
    delivered: int = 0
    emails_sent: int = 0
    pushes_sent: int = 0
    duplicates_skipped: int = 0
    errors: List[str] = Field(default_factory=list)


class NotificationTriggerResponse(NotificationPassResult):
    success: bool
    message: str


class SchedulerStatusResponse(BaseModel):
    running: bool
    quiet_hours: bool
    run_minute: int
    timezone: str
