from abc import ABC, abstractmethod

from reelforge.core.services.platforms.schemas import (
    AccountStatus,
    ConnectionTest,
    HealthReport,
    PlatformName,
    PostMetrics,
    QueueRequest,
    QueueResult,
    UploadRequest,
    UploadResult,
)


class PlatformServiceInterface(ABC):
    """Interface for social platform services.

    Account state is only ever changed through this interface, so the
    workflows never touch accounts directly.
    """

    async def close(self) -> None:  # noqa: B027
        """Close any resources held by the service.

        Override in implementations that need cleanup.
        """

    @abstractmethod
    async def upload(self, platform: PlatformName, request: UploadRequest) -> UploadResult:
        """Publish a video from an account.

        Returns:
            UploadResult with the platform post id and public URL
        """
        raise NotImplementedError

    @abstractmethod
    async def get_metrics(self, platform: PlatformName, account_id: str, post_id: str) -> PostMetrics:
        """Fetch engagement counters for a published post."""
        raise NotImplementedError

    @abstractmethod
    async def check_health(self, platform: PlatformName, account_id: str) -> HealthReport:
        """Report whether the account is blocked, rate limited or flagged."""
        raise NotImplementedError

    @abstractmethod
    async def rotate_proxy(self, platform: PlatformName, account_id: str) -> str:
        """Assign the next proxy from the pool to the account.

        Returns:
            The newly assigned proxy
        """
        raise NotImplementedError

    @abstractmethod
    async def test_connection(self, platform: PlatformName, account_id: str, proxy: str) -> ConnectionTest:
        """Check the account can reach the platform through a proxy."""
        raise NotImplementedError

    @abstractmethod
    async def perform_actions(self, platform: PlatformName, account_id: str, actions: list[str], count: int) -> None:
        """Perform organic actions (view, like, follow...) from an account."""
        raise NotImplementedError

    @abstractmethod
    async def update_status(self, platform: PlatformName, account_id: str, status: AccountStatus) -> None:
        raise NotImplementedError

    @abstractmethod
    async def queue_content(self, request: QueueRequest) -> QueueResult:
        """Schedule content for later distribution."""
        raise NotImplementedError
