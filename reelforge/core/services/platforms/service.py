from reelforge.core.services.platforms.base_service import PlatformServiceInterface
from reelforge.core.services.platforms.schemas import PlatformProvider


def get_platform_service(provider: PlatformProvider = PlatformProvider.GATEWAY) -> PlatformServiceInterface:
    """Factory function to get a platform service instance.

    Args:
        provider: Platform backend to use (default: HTTP gateway)

    Returns:
        PlatformServiceInterface implementation
    """
    if provider == PlatformProvider.GATEWAY:
        from reelforge.core.services.platforms.providers.gateway.service import GatewayPlatformService

        return GatewayPlatformService()
    raise ValueError(f'Unsupported platform provider: {provider}')
