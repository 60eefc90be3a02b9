import asyncio
import hashlib
import random
from datetime import timedelta
from typing import Optional

from pydantic import BaseModel

from supplier_auth.core.errors import Expired, InvalidCredential, InvalidInput, UserNotFound
from supplier_auth.dto.auth_otp import PublicUser
from supplier_auth.dto.phone_validations import normalize_phone, validate_phone_number
from supplier_auth.integrations.whatsapp_notifier import Notifier
from supplier_auth.logging.utils import get_app_logger
from supplier_auth.middlewares.request_context import request_context
from supplier_auth.repository.otp import OTPRepository
from supplier_auth.repository.users import UserRepository
from supplier_auth.services.token_service import TokenService
from supplier_auth.utils.datetime_helpers import Clock, as_utc, get_utc_now

logger = get_app_logger("supplier_auth.otp_service")

OTP_LENGTH = 6
OTP_MESSAGE_TEMPLATE = (
    "Your supplier portal verification code is {code}. "
    "It expires in {minutes} minutes. Do not share this code with anyone."
)

_system_random = random.SystemRandom()


class OTPRequestResult(BaseModel):
    phone: str
    expires_in_seconds: int
    code: Optional[str] = None


class OTPVerifyResult(BaseModel):
    token: str
    user: PublicUser


class OTPService:
    """
    OTP login flow:
    - code generation, hashing and keyed storage
    - best-effort delivery through the notifier
    - verification, single consumption and token minting
    """

    def __init__(self, user_repository: UserRepository, otp_repository: OTPRepository,
                 token_service: TokenService, notifier: Notifier, clock: Clock = get_utc_now,
                 otp_expiry_minutes: int = 10, expose_code: bool = False):
        self.users = user_repository
        self.otps = otp_repository
        self.tokens = token_service
        self.notifier = notifier
        self.clock = clock
        self.otp_expiry_minutes = otp_expiry_minutes
        self.expose_code = expose_code

    def generate_otp(self) -> str:
        """Uniform 6-digit code from the system random source."""
        return str(_system_random.randint(10 ** (OTP_LENGTH - 1), (10 ** OTP_LENGTH) - 1))

    def hash_otp(self, otp: str) -> str:
        return hashlib.sha256(otp.encode()).hexdigest()

    async def _deliver(self, phone: str, code: str):
        message = OTP_MESSAGE_TEMPLATE.format(code=code, minutes=self.otp_expiry_minutes)
        try:
            result = await self.notifier.send(phone, message)
        except Exception as e:
            logger.error(f"otp_delivery_error | phone={phone} error={e}", exc_info=True)
            return
        if not result.ok:
            logger.warning(f"otp_delivery_failed | phone={phone} detail={result.detail}")

    async def request_code(self, phone: Optional[str]) -> OTPRequestResult:
        """
        Issue a fresh code for ``phone``, replacing any pending one.

        Raises:
            InvalidInput: phone missing or too short
        """
        phone = validate_phone_number(phone)
        request_context.phone = phone

        user = await asyncio.to_thread(self.users.get_or_create_by_phone, phone)

        code = self.generate_otp()
        now = self.clock()
        expires_at = now + timedelta(minutes=self.otp_expiry_minutes)
        await asyncio.to_thread(self.otps.upsert, phone, self.hash_otp(code), expires_at, now)
        logger.info(f"otp_issued | phone={phone} user_id={user.id}")

        await self._deliver(phone, code)

        return OTPRequestResult(
            phone=phone,
            expires_in_seconds=self.otp_expiry_minutes * 60,
            code=code if self.expose_code else None,
        )

    async def verify_code(self, phone: Optional[str], otp: Optional[str],
                          device_info: Optional[str] = None) -> OTPVerifyResult:
        """
        Check a submitted code and log the user in.

        The watermark written to the user and the token's ``iat`` come from
        the same captured instant.

        Raises:
            InvalidInput: code not 6 characters or phone missing
            InvalidCredential: no pending code matches, or it was consumed concurrently
            Expired: the matching code is past its expiry
            UserNotFound: the account disappeared between request and verify
        """
        if not otp or len(otp) != OTP_LENGTH:
            raise InvalidInput("Valid 6-digit OTP is required")
        if not phone:
            raise InvalidInput("Phone number is required")

        phone = normalize_phone(phone)
        request_context.phone = phone
        otp_hash = self.hash_otp(otp)

        record = await asyncio.to_thread(self.otps.find, phone, otp_hash)
        if record is None:
            logger.warning(f"otp_invalid | phone={phone}")
            raise InvalidCredential()

        if self.clock() >= as_utc(record.expires_at):
            await asyncio.to_thread(self.otps.consume, phone, otp_hash)
            logger.warning(f"otp_expired | phone={phone}")
            raise Expired()

        user = await asyncio.to_thread(self.users.get_by_phone, phone)
        if user is None:
            raise UserNotFound()

        now = self.clock()
        if not await asyncio.to_thread(self.otps.consume, phone, otp_hash):
            logger.warning(f"otp_already_consumed | phone={phone}")
            raise InvalidCredential()

        device_info = device_info or ""
        user = await asyncio.to_thread(self.users.mark_login, user.id, now, device_info)
        if user is None:
            raise UserNotFound()

        token = self.tokens.issue(user.id, now, device=device_info or None)
        request_context.user_id = user.id
        logger.info(f"otp_verified | phone={phone} user_id={user.id} token_prefix={token[:10]}")

        return OTPVerifyResult(token=token, user=PublicUser.from_user(user))
