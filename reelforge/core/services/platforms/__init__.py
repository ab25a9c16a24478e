from reelforge.core.services.platforms.base_service import PlatformServiceInterface
from reelforge.core.services.platforms.schemas import (
    WARMUP_SCHEDULE,
    AccountConfig,
    AccountStatus,
    HealthReport,
    PlatformName,
    PlatformProvider,
    PlatformTarget,
    PostMetrics,
    QueueRequest,
    UploadRequest,
)
from reelforge.core.services.platforms.service import get_platform_service

__all__ = [
    'WARMUP_SCHEDULE',
    'AccountConfig',
    'AccountStatus',
    'HealthReport',
    'PlatformName',
    'PlatformProvider',
    'PlatformServiceInterface',
    'PlatformTarget',
    'PostMetrics',
    'QueueRequest',
    'UploadRequest',
    'get_platform_service',
]
