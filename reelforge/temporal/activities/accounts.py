"""Account health, proxy rotation and warm-up activities."""

import asyncio

from temporalio import activity
from temporalio.exceptions import ApplicationError

from reelforge.core.services.platforms import WARMUP_SCHEDULE, AccountStatus, get_platform_service
from reelforge.temporal.schemas import AccountHealth, AccountHealthInput, ProxyRotationOutput

# Time between warm-up days
WARMUP_DAY_SECONDS = 24 * 3600
WARMUP_HEARTBEAT_SECONDS = 60


@activity.defn
async def check_account_health(input: AccountHealthInput) -> AccountHealth:
    service = get_platform_service()
    try:
        health = await service.check_health(input.platform, input.account_id)
    finally:
        await service.close()

    return AccountHealth(
        needs_rotation=health.proxy_blocked or health.rate_limited,
        status=health.status,
        warnings=health.warnings,
    )


@activity.defn
async def rotate_proxy(input: AccountHealthInput) -> ProxyRotationOutput:
    """Move the account to the next proxy and verify the connection.

    Raises:
        ApplicationError: If the new proxy fails its connection test (retried)
    """
    service = get_platform_service()
    try:
        proxy = await service.rotate_proxy(input.platform, input.account_id)
        test = await service.test_connection(input.platform, input.account_id, proxy)
    finally:
        await service.close()

    if not test.success:
        raise ApplicationError(f'Proxy rotation failed for {input.account_id}', type='ProxyRotationError')

    activity.logger.info(f'Rotated proxy for {input.platform.value}:{input.account_id}')
    return ProxyRotationOutput(account_id=input.account_id, proxy=proxy)


@activity.defn
async def warm_up_account(input: AccountHealthInput) -> None:
    """Ramp up organic activity over a week, then mark the account active.

    Heartbeats carry the last finished day, so a retried attempt resumes there.
    """
    details = activity.info().heartbeat_details
    completed_day = int(details[0]) if details else 0

    service = get_platform_service()
    try:
        for schedule in WARMUP_SCHEDULE:
            if schedule.day <= completed_day:
                continue

            await service.perform_actions(input.platform, input.account_id, schedule.actions, schedule.count)
            activity.heartbeat(schedule.day)
            activity.logger.info(f'Warm-up day {schedule.day} done for {input.account_id}')

            if schedule.day < len(WARMUP_SCHEDULE):
                await _sleep_with_heartbeat(WARMUP_DAY_SECONDS, schedule.day)

        await service.update_status(input.platform, input.account_id, AccountStatus.ACTIVE)
    finally:
        await service.close()


async def _sleep_with_heartbeat(seconds: float, day: int) -> None:
    remaining = seconds
    while remaining > 0:
        step = min(WARMUP_HEARTBEAT_SECONDS, remaining)
        await asyncio.sleep(step)
        remaining -= step
        activity.heartbeat(day)
