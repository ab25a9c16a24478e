"""Distribution, measurement and replication activities.

All platform access goes through the platform service.
"""

import math
from datetime import datetime, timedelta, timezone

from temporalio import activity

from reelforge.core.services.platforms import AccountStatus, UploadRequest, get_platform_service
from reelforge.core.services.platforms.publishing import build_caption, build_hashtags, next_optimal_post_time
from reelforge.core.services.platforms.schemas import QueueRequest
from reelforge.temporal.schemas import (
    DistributeContentInput,
    Distribution,
    PerformanceInput,
    PerformanceReport,
    VariationInput,
    VariationModifications,
    VariationOutput,
)

# Modification cycles, indexed by variation number
VARIATION_SPEEDS = [0.9, 1.0, 1.1]
VARIATION_FILTERS = ['none', 'warm', 'cool', 'vintage']
VARIATION_CROPS = ['original', 'tight', 'wide']
VARIATION_AUDIO = ['original', 'pitch+1', 'pitch-1']


def calculate_viral_score(views: int, engagement_rate: float, share_ratio: float, first_hour_views: int) -> int:
    """Viral score in [0, 100].

    Views, engagement rate (percent), share ratio (percent) and first hour
    velocity contribute at most 30, 30, 20 and 20 points.
    """
    score = (
        min(views / 10000, 30)
        + min(engagement_rate * 5, 30)
        + min(share_ratio * 10, 20)
        + min(first_hour_views / 1000, 20)
    )
    return int(math.floor(score + 0.5))


def variation_modifications(index: int) -> VariationModifications:
    return VariationModifications(
        speed=VARIATION_SPEEDS[index % len(VARIATION_SPEEDS)],
        filter=VARIATION_FILTERS[index % len(VARIATION_FILTERS)],
        crop=VARIATION_CROPS[index % len(VARIATION_CROPS)],
        audio=VARIATION_AUDIO[index % len(VARIATION_AUDIO)],
    )


@activity.defn
async def distribute_content(input: DistributeContentInput) -> list[Distribution]:
    """Publish a video from every active account of every target platform.

    A failed upload is recorded as a failed distribution, never raised.
    """
    content = input.content
    distributions: list[Distribution] = []
    service = get_platform_service()

    try:
        for target in input.platforms:
            for account in target.accounts:
                if account.status != AccountStatus.ACTIVE:
                    continue

                request = UploadRequest(
                    account_id=account.id,
                    video_path=content.video_path,
                    caption=build_caption(content.hook, target.name),
                    hashtags=build_hashtags(target.name, content.hashtags),
                    scheduled_time=next_optimal_post_time(target.name, datetime.now(timezone.utc)),
                    proxy=account.proxy,
                )

                try:
                    result = await service.upload(target.name, request)
                except Exception as e:
                    activity.logger.warning(f'Distribution failed for {target.name.value}:{account.id}: {e}')
                    distributions.append(
                        Distribution(platform=target.name, account_id=account.id, status='failed', error=str(e))
                    )
                    continue

                distributions.append(
                    Distribution(
                        platform=target.name,
                        account_id=account.id,
                        status='published',
                        post_id=result.post_id,
                        url=result.url,
                    )
                )
                activity.heartbeat({'stage': 'distribute', 'published': len(distributions)})
    finally:
        await service.close()

    published = sum(1 for d in distributions if d.status == 'published')
    activity.logger.info(f'Content {content.id} published to {published}/{len(distributions)} accounts')

    return distributions


@activity.defn
async def analyze_performance(input: PerformanceInput) -> PerformanceReport:
    """Aggregate post metrics across published distributions into a viral score.

    Posts whose metrics cannot be fetched are skipped.
    """
    report = PerformanceReport(content_id=input.content_id)
    best_views = 0
    service = get_platform_service()

    try:
        for dist in input.distributions:
            if dist.status != 'published' or not dist.post_id:
                continue

            try:
                metrics = await service.get_metrics(dist.platform, dist.account_id, dist.post_id)
            except Exception as e:
                activity.logger.warning(f'Metrics collection failed for {dist.platform.value}:{dist.post_id}: {e}')
                continue

            report.views += metrics.views
            report.likes += metrics.likes
            report.comments += metrics.comments
            report.shares += metrics.shares

            if metrics.views > best_views:
                best_views = metrics.views
                report.best_platform = dist.platform
                report.url = dist.url
    finally:
        await service.close()

    if report.views > 0:
        report.engagement = (report.likes + report.comments + report.shares) / report.views * 100
        share_ratio = report.shares / report.views * 100
    else:
        share_ratio = 0.0

    report.viral_score = calculate_viral_score(report.views, report.engagement, share_ratio, best_views)
    return report


@activity.defn
async def generate_variation(input: VariationInput) -> VariationOutput:
    """Queue a lightly modified copy of successful content.

    The modification set is chosen by index; variations are staggered by
    `stagger_seconds` each.
    """
    modifications = variation_modifications(input.variation_index)
    scheduled_for = datetime.now(timezone.utc) + timedelta(seconds=input.variation_index * input.stagger_seconds)

    service = get_platform_service()
    try:
        queued = await service.queue_content(
            QueueRequest(
                content_id=input.content.id,
                payload={
                    **input.content.model_dump(mode='json'),
                    'variation_index': input.variation_index,
                    'modifications': modifications.model_dump(),
                },
                priority='high',
                scheduled_for=scheduled_for,
            )
        )
    finally:
        await service.close()

    activity.logger.info(f'Queued variation {input.variation_index} of {input.content.id} as {queued.queued_id}')

    return VariationOutput(
        queued_id=queued.queued_id,
        variation_index=input.variation_index,
        modifications=modifications,
        scheduled_for=scheduled_for,
        cost=input.unit_cost,
    )
