"""
Wiring for the auth core.

``build_components`` assembles every store and service from ``AuthConfigs``;
tests pass their own session factory, clock, notifier, redis client or
rate-limit storage.
"""
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Optional

from limits.storage import Storage
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from supplier_auth.config.settings import AuthConfigs
from supplier_auth.connections.database import create_db_engine, create_session_factory
from supplier_auth.connections.redis_wrapper import RedisJSONWrapper
from supplier_auth.integrations.whatsapp_notifier import Notifier, WhatsAppNotifier
from supplier_auth.logging.utils import get_app_logger
from supplier_auth.repository.otp import OTPRepository
from supplier_auth.repository.users import UserRepository
from supplier_auth.services.otp_service import OTPService
from supplier_auth.services.rate_limit_service import RateLimiter, create_rate_limit_storage
from supplier_auth.services.session_service import SessionService
from supplier_auth.services.token_blacklist import MemoryTokenBlacklist, RedisTokenBlacklist, TokenBlacklist
from supplier_auth.services.token_service import TokenService
from supplier_auth.tasks.cleanup import CleanupTask
from supplier_auth.utils.datetime_helpers import Clock, get_utc_now

logger = get_app_logger("supplier_auth.container")

OTP_REQUEST_LIMITER = "otp_request"
OTP_VERIFY_LIMITER = "otp_verify"


@dataclass
class AuthComponents:
    configs: AuthConfigs
    session_factory: sessionmaker
    users: UserRepository
    otps: OTPRepository
    tokens: TokenService
    blacklist: TokenBlacklist
    otp_request_limiter: RateLimiter
    otp_verify_limiter: RateLimiter
    notifier: Notifier
    otp_service: OTPService
    session_service: SessionService
    cleanup_task: CleanupTask
    engine: Optional[Engine] = None
    clock: Clock = field(default=get_utc_now)


def _redis_wrapper(configs: AuthConfigs, redis_client=None) -> RedisJSONWrapper:
    if redis_client is not None:
        return RedisJSONWrapper(client=redis_client)
    wrapper = RedisJSONWrapper(configs.REDIS_URL, database=configs.REDIS_CACHE_DB)
    if not wrapper.connected:
        raise RuntimeError(f"STATE_BACKEND=redis but redis is unreachable at {configs.REDIS_URL}")
    return wrapper


def build_components(configs: Optional[AuthConfigs] = None, session_factory: Optional[sessionmaker] = None,
                     clock: Clock = get_utc_now, notifier: Optional[Notifier] = None,
                     redis_client=None, rate_limit_storage: Optional[Storage] = None) -> AuthComponents:
    configs = configs or AuthConfigs()

    engine = None
    if session_factory is None:
        engine = create_db_engine(configs.DATABASE_URL)
        session_factory = create_session_factory(engine)

    users = UserRepository(session_factory)
    otps = OTPRepository(session_factory)
    tokens = TokenService(
        configs.JWT_SECRET,
        algorithm=configs.JWT_ALGORITHM,
        default_lifetime=timedelta(days=configs.TOKEN_EXPIRY_DAYS),
    )

    if configs.STATE_BACKEND == "redis" or redis_client is not None:
        redis_wrapper = _redis_wrapper(configs, redis_client)
        blacklist = RedisTokenBlacklist(redis_wrapper)
    else:
        blacklist = MemoryTokenBlacklist()
    rate_limit_storage = rate_limit_storage or create_rate_limit_storage(configs)

    otp_request_limiter = RateLimiter(
        OTP_REQUEST_LIMITER, configs.OTP_REQUEST_RATE_LIMIT, configs.OTP_REQUEST_RATE_WINDOW_SECONDS,
        storage=rate_limit_storage,
    )
    otp_verify_limiter = RateLimiter(
        OTP_VERIFY_LIMITER, configs.OTP_VERIFY_RATE_LIMIT, configs.OTP_VERIFY_RATE_WINDOW_SECONDS,
        storage=rate_limit_storage,
    )

    notifier = notifier or WhatsAppNotifier(
        api_url=configs.WHATSAPP_API_URL,
        access_token=configs.WHATSAPP_ACCESS_TOKEN,
        phone_number_id=configs.WHATSAPP_PHONE_NUMBER_ID,
        timeout=configs.WHATSAPP_TIMEOUT,
    )

    otp_service = OTPService(
        users, otps, tokens, notifier,
        clock=clock,
        otp_expiry_minutes=configs.OTP_EXPIRY_MINUTES,
        expose_code=configs.DEBUG,
    )
    session_service = SessionService(
        users, tokens, blacklist,
        clock=clock,
        revocation_grace_seconds=configs.TOKEN_REVOCATION_GRACE_SECONDS,
    )
    cleanup_task = CleanupTask(
        otps, [otp_request_limiter, otp_verify_limiter], blacklist,
        clock=clock,
        blacklist_max_size=configs.BLACKLIST_MAX_SIZE,
        interval_seconds=configs.CLEANUP_INTERVAL_SECONDS,
    )

    logger.info(f"components_built | state_backend={configs.STATE_BACKEND} debug={configs.DEBUG}")
    return AuthComponents(
        configs=configs,
        session_factory=session_factory,
        users=users,
        otps=otps,
        tokens=tokens,
        blacklist=blacklist,
        otp_request_limiter=otp_request_limiter,
        otp_verify_limiter=otp_verify_limiter,
        notifier=notifier,
        otp_service=otp_service,
        session_service=session_service,
        cleanup_task=cleanup_task,
        engine=engine,
        clock=clock,
    )
