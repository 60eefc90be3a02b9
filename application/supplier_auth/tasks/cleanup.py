"""
Periodic housekeeping: expired OTP rows, stale rate-limit windows and an
oversized blacklist.
"""
import asyncio
from typing import Dict, Iterable

from supplier_auth.logging.utils import get_app_logger
from supplier_auth.repository.otp import OTPRepository
from supplier_auth.services.rate_limit_service import RateLimiter
from supplier_auth.services.token_blacklist import TokenBlacklist
from supplier_auth.utils.datetime_helpers import Clock, get_utc_now

logger = get_app_logger("supplier_auth.cleanup")


class CleanupTask:

    def __init__(self, otp_repository: OTPRepository, limiters: Iterable[RateLimiter],
                 blacklist: TokenBlacklist, clock: Clock = get_utc_now,
                 blacklist_max_size: int = 10000, interval_seconds: int = 3600):
        self.otps = otp_repository
        self.limiters = list(limiters)
        self.blacklist = blacklist
        self.clock = clock
        self.blacklist_max_size = blacklist_max_size
        self.interval_seconds = interval_seconds

    def run_once(self) -> Dict[str, int]:
        """
        One sweep. Each step runs on its own so a failing store never stops
        the others; failed steps report -1.
        """
        report = {"expired_otps": -1, "emptied_windows": -1, "blacklist_cleared": -1}

        try:
            report["expired_otps"] = self.otps.delete_expired(self.clock())
        except Exception as e:
            logger.error(f"cleanup_otp_error | error={e}", exc_info=True)

        emptied = 0
        failed = False
        for limiter in self.limiters:
            try:
                emptied += limiter.prune()
            except Exception as e:
                failed = True
                logger.error(f"cleanup_rate_limit_error | limiter={limiter.name} error={e}", exc_info=True)
        if not failed:
            report["emptied_windows"] = emptied

        try:
            size = self.blacklist.size()
            if size > self.blacklist_max_size:
                self.blacklist.clear()
                logger.warning(f"blacklist_cleared | size={size} max_size={self.blacklist_max_size}")
                report["blacklist_cleared"] = size
            else:
                report["blacklist_cleared"] = 0
        except Exception as e:
            logger.error(f"cleanup_blacklist_error | error={e}", exc_info=True)

        logger.info(
            f"cleanup_completed | expired_otps={report['expired_otps']} "
            f"emptied_windows={report['emptied_windows']} blacklist_cleared={report['blacklist_cleared']}"
        )
        return report

    async def run_forever(self):
        logger.info(f"cleanup_started | interval_seconds={self.interval_seconds}")
        try:
            while True:
                await asyncio.sleep(self.interval_seconds)
                await asyncio.to_thread(self.run_once)
        except asyncio.CancelledError:
            logger.info("cleanup_stopped")
            raise
