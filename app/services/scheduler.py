"""Periodic boost expiry.

Runs the same cleanup the listing endpoints run at request time, on an
interval (Flask-APScheduler) and on demand (`flask expire-boosts`, for
cron). Both may overlap with requests; the cleanup is idempotent.
"""

import logging
from datetime import datetime, timezone

import click
from flask_apscheduler import APScheduler

from app.services.promotion_state import StorageUnavailable, get_promotion_manager
from app.services.promotions import deactivate_expired_promotions
from app.utils.dates import utcnow, to_naive_utc

logger = logging.getLogger(__name__)

scheduler = APScheduler()

CLEANUP_JOB_ID = 'expire_promotion_boosts'


def run_boost_cleanup(app, now=None):
    """Expire stale boosts and promotion records. Never raises into the scheduler.

    Returns:
        dict with 'boosts' (per-boost counts, or None if the store was
        unreachable) and 'promotions' (records deactivated, or None)
    """
    now = utcnow() if now is None else to_naive_utc(now)
    summary = {'boosts': None, 'promotions': None}

    with app.app_context():
        try:
            summary['boosts'] = get_promotion_manager().cleanup_expired_boosts(now)
        except StorageUnavailable as e:
            logger.warning(f'Scheduled boost cleanup failed: {e}')

        try:
            summary['promotions'] = deactivate_expired_promotions(now)
        except Exception as e:
            logger.warning(f'Scheduled promotion expiry failed: {e}')

    logger.info(f'Scheduled boost cleanup finished: {summary}')
    return summary


def init_scheduler(app):
    """Register the periodic cleanup job and start the scheduler if enabled."""
    if not app.config.get('SCHEDULER_ENABLED'):
        logger.debug('Scheduler disabled; boost cleanup runs at request time only')
        return None

    if scheduler.running:
        return scheduler

    minutes = app.config.get('BOOST_CLEANUP_INTERVAL_MINUTES', 5)
    scheduler.init_app(app)
    scheduler.add_job(
        id=CLEANUP_JOB_ID,
        func=run_boost_cleanup,
        args=[app],
        trigger='interval',
        minutes=minutes,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        # first pass at startup, then on the interval
        next_run_time=datetime.now(timezone.utc),
    )
    scheduler.start()
    logger.info(f'Boost cleanup scheduled every {minutes} minute(s)')
    return scheduler


def register_cli(app):
    """Attach the `expire-boosts` command to the app's CLI."""

    @app.cli.command('expire-boosts')
    @click.option('--now', 'now', required=False, help='Reference time (ISO-8601), defaults to current UTC time')
    def expire_boosts(now):
        """Clear expired featured/urgent/sticky boosts once."""
        try:
            reference = to_naive_utc(now) if now else None
        except ValueError:
            raise click.BadParameter(f'Not an ISO-8601 timestamp: {now}', param_hint='--now')

        summary = run_boost_cleanup(app, reference)
        boosts = summary['boosts']
        if boosts is None:
            raise click.ClickException('Listings store unavailable; no boosts were expired.')

        for boost, count in boosts.items():
            click.echo(f"{boost}: {'failed' if count is None else count}")
        click.echo(f"promotions: {summary['promotions'] if summary['promotions'] is not None else 'failed'}")
