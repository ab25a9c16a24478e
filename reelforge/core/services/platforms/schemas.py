from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class PlatformProvider(str, Enum):
    """Backends able to talk to social platforms."""

    GATEWAY = 'gateway'


class PlatformName(str, Enum):
    """Social platforms content is distributed to."""

    TIKTOK = 'tiktok'
    YOUTUBE = 'youtube'
    INSTAGRAM = 'instagram'


class AccountStatus(str, Enum):
    """Lifecycle of a platform account."""

    ACTIVE = 'active'
    WARMING = 'warming'
    FLAGGED = 'flagged'


class AccountConfig(BaseModel):
    """One posting identity on a platform."""

    id: str = Field(description='Account identifier on the gateway')
    username: str = Field('', description='Public handle')
    proxy: str | None = Field(None, description='Proxy currently assigned to the account')
    status: AccountStatus = Field(AccountStatus.ACTIVE)


class PlatformTarget(BaseModel):
    """A platform together with the accounts content is posted from."""

    name: PlatformName
    accounts: list[AccountConfig] = Field(default_factory=list)


class UploadRequest(BaseModel):
    """Upload of one video to one account."""

    account_id: str
    video_path: str = Field(description='Local path or URL of the video to publish')
    caption: str = ''
    hashtags: list[str] = Field(default_factory=list)
    scheduled_time: datetime | None = None
    proxy: str | None = None


class UploadResult(BaseModel):
    post_id: str
    url: str


class PostMetrics(BaseModel):
    """Engagement counters for a published post."""

    views: int = 0
    likes: int = 0
    comments: int = 0
    shares: int = 0


class HealthReport(BaseModel):
    """Account health as reported by the platform gateway."""

    status: str = 'ok'
    proxy_blocked: bool = False
    rate_limited: bool = False
    warnings: list[str] = Field(default_factory=list)


class ConnectionTest(BaseModel):
    success: bool
    latency_ms: float | None = None


class QueueRequest(BaseModel):
    """Content scheduled for later distribution."""

    content_id: str
    payload: dict[str, Any] = Field(default_factory=dict)
    priority: str = 'high'
    scheduled_for: datetime


class QueueResult(BaseModel):
    queued_id: str


class WarmupDay(BaseModel):
    """One day of the account warm-up schedule."""

    day: int
    actions: list[str]
    count: int


# Gradual activity increase over one week, ending with a first post
WARMUP_SCHEDULE: list[WarmupDay] = [
    WarmupDay(day=1, actions=['view', 'like'], count=5),
    WarmupDay(day=2, actions=['view', 'like', 'comment'], count=10),
    WarmupDay(day=3, actions=['view', 'like', 'comment', 'follow'], count=15),
    WarmupDay(day=4, actions=['view', 'like', 'comment', 'follow'], count=20),
    WarmupDay(day=5, actions=['view', 'like', 'comment', 'follow', 'share'], count=25),
    WarmupDay(day=6, actions=['view', 'like', 'comment', 'follow', 'share'], count=30),
    WarmupDay(day=7, actions=['post'], count=1),
]
