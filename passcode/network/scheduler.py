"""
Periodic jobs for the passcode service

Jobs:
- Expiry sweep every MFA_SWEEP_INTERVAL_MINUTES, deletes tokens past their expiry
"""

from apscheduler.schedulers.blocking import BlockingScheduler
from loguru import logger

from passcode import settings
from passcode.setup import run as setup


def run_expiry_sweep():
    """Delete expired passcodes."""
    from passcode.core.mfa.service import MfaService

    logger.info('Running passcode expiry sweep')
    count = MfaService.factory().sweep_expired()
    logger.info(f'Passcode expiry sweep complete: {count} removed')


def build_scheduler() -> BlockingScheduler:
    scheduler = BlockingScheduler(timezone='UTC')
    scheduler.add_job(
        run_expiry_sweep,
        'interval',
        minutes=settings.MFA_SETTINGS['SWEEP_INTERVAL_MINUTES'],
        id='passcode_expiry_sweep',
        name='Passcode Expiry Sweep',
        # A slow sweep should not stack up behind itself
        max_instances=1,
        coalesce=True,
    )
    return scheduler


if __name__ == '__main__':
    setup()

    scheduler = build_scheduler()
    logger.info('Scheduler starting with jobs:')
    logger.info(f'  - Passcode expiry sweep: every {settings.MFA_SETTINGS["SWEEP_INTERVAL_MINUTES"]} minutes')

    try:
        scheduler.start()
    except KeyboardInterrupt:
        logger.info('Scheduler stopped')
        scheduler.shutdown()
