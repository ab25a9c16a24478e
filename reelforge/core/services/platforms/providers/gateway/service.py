import httpx

from reelforge.core.configs import app_config
from reelforge.core.services.platforms.base_service import PlatformServiceInterface
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


class GatewayPlatformService(PlatformServiceInterface):
    """Platform service backed by the HTTP platform gateway.

    The gateway owns platform sessions, cookies and the proxy pool. Every
    non-2xx response raises `httpx.HTTPStatusError` so activity retries apply.
    """

    def __init__(self, base_url: str | None = None, api_key: str | None = None) -> None:
        self._base_url = (base_url or app_config.PLATFORM_GATEWAY_URL).rstrip('/')
        self._api_key = api_key or app_config.PLATFORM_GATEWAY_API_KEY
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {'Content-Type': 'application/json'}
            if self._api_key:
                headers['Authorization'] = f'Bearer {self._api_key}'
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers=headers,
                timeout=app_config.PLATFORM_GATEWAY_TIMEOUT,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @staticmethod
    def _account_path(platform: PlatformName, account_id: str) -> str:
        return f'/platforms/{platform.value}/accounts/{account_id}'

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        client = await self._get_client()
        response = await client.request(method, path, **kwargs)
        response.raise_for_status()
        return response

    async def upload(self, platform: PlatformName, request: UploadRequest) -> UploadResult:
        response = await self._request(
            'POST',
            f'{self._account_path(platform, request.account_id)}/uploads',
            json=request.model_dump(mode='json'),
        )
        return UploadResult.model_validate(response.json())

    async def get_metrics(self, platform: PlatformName, account_id: str, post_id: str) -> PostMetrics:
        response = await self._request('GET', f'{self._account_path(platform, account_id)}/posts/{post_id}/metrics')
        return PostMetrics.model_validate(response.json())

    async def check_health(self, platform: PlatformName, account_id: str) -> HealthReport:
        response = await self._request('GET', f'{self._account_path(platform, account_id)}/health')
        return HealthReport.model_validate(response.json())

    async def rotate_proxy(self, platform: PlatformName, account_id: str) -> str:
        response = await self._request('POST', f'{self._account_path(platform, account_id)}/proxy/rotate')
        return str(response.json()['proxy'])

    async def test_connection(self, platform: PlatformName, account_id: str, proxy: str) -> ConnectionTest:
        response = await self._request(
            'POST',
            f'{self._account_path(platform, account_id)}/proxy/test',
            json={'proxy': proxy},
        )
        return ConnectionTest.model_validate(response.json())

    async def perform_actions(self, platform: PlatformName, account_id: str, actions: list[str], count: int) -> None:
        await self._request(
            'POST',
            f'{self._account_path(platform, account_id)}/actions',
            json={'actions': actions, 'count': count},
        )

    async def update_status(self, platform: PlatformName, account_id: str, status: AccountStatus) -> None:
        await self._request(
            'PATCH',
            f'{self._account_path(platform, account_id)}/status',
            json={'status': status.value},
        )

    async def queue_content(self, request: QueueRequest) -> QueueResult:
        response = await self._request('POST', '/content-queue', json=request.model_dump(mode='json'))
        return QueueResult.model_validate(response.json())
