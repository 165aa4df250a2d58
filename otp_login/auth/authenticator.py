"""
OTP Authenticator
=================
Two-step login: password check, then a one-time code.

Usage:
    authenticator = OtpAuthenticator(
        credentials=CallbackCredentialStore(load_hash),
        delivery=EmailDelivery(),
        sessions=PanelSessions(),
        code_store=SQLAlchemyCodeStore(session_factory),
        rate_limiter=RedisRateLimiter(redis),
    )

    flow = authenticator.start()
    issued = await authenticator.submit_credentials(flow, email, password)
    ...
    await authenticator.submit_code(flow, code)
"""

from contextlib import contextmanager
from typing import Optional

import structlog

from otp_login.codes import CodeGenerator, CodeStore, normalize_identity, hash_identity
from otp_login.config import OTPLoginConfig
from otp_login.credentials import CredentialStore
from otp_login.errors import (
    CodeCollisionError,
    CodeSpaceExhausted,
    ExpiredCode,
    InfrastructureError,
    InvalidCode,
    InvalidCredentials,
    InvalidTransition,
    OTPLoginError,
    PolicyRejected,
    Throttled,
)
from otp_login.rate_limit import InMemoryRateLimiter, RateLimiter
from .collaborators import DeliveryChannel, SessionEstablisher
from .models import CodeIssued, LoginFlow, LoginState, SessionDecision

logger = structlog.get_logger(__name__)

# Store-side collisions only happen under concurrent issuance; the generator
# already skips values it sees as active.
ISSUE_ATTEMPTS = 3


@contextmanager
def _collaborator(name: str):
    """Translate unexpected collaborator failures into InfrastructureError."""
    try:
        yield
    except OTPLoginError:
        raise
    except Exception as e:
        logger.error("Collaborator failed", collaborator=name, error=str(e))
        raise InfrastructureError(f"{name} unavailable") from e


class OtpAuthenticator:
    """
    Drives a LoginFlow through its states.

    Holds no per-user state of its own; everything shared lives in the
    code store and the rate limiter, so one instance can serve all
    requests.
    """

    def __init__(
        self,
        credentials: CredentialStore,
        delivery: DeliveryChannel,
        sessions: SessionEstablisher,
        code_store: CodeStore,
        rate_limiter: Optional[RateLimiter] = None,
        config: Optional[OTPLoginConfig] = None,
        generator: Optional[CodeGenerator] = None,
    ):
        self.config = config or OTPLoginConfig()
        self.credentials = credentials
        self.delivery = delivery
        self.sessions = sessions
        self.code_store = code_store
        self.rate_limiter = rate_limiter or InMemoryRateLimiter.from_config(self.config)
        self.generator = generator or CodeGenerator(
            code_store,
            length=self.config.code_length,
            max_attempts=self.config.max_generation_attempts,
        )

    def start(self) -> LoginFlow:
        return LoginFlow()

    async def submit_credentials(
        self,
        flow: LoginFlow,
        identity: str,
        secret: str,
        remember: bool = False,
        origin: Optional[str] = None,
    ) -> CodeIssued:
        """
        Check the password and send a code.

        Args:
            flow: Flow awaiting credentials
            identity: Login identity (e.g. email)
            secret: Password
            remember: Passed on to the session establisher
            origin: Optional client origin (e.g. IP) to scope rate limiting

        Raises:
            Throttled: Too many credential attempts
            InvalidCredentials: Unknown identity or wrong password
            InfrastructureError: A store or collaborator failed
        """
        self._require(flow, LoginState.AWAITING_CREDENTIALS)
        identity = normalize_identity(identity)

        await self._throttle("credentials", identity, origin)

        with _collaborator("credential_store"):
            verified = await self.credentials.verify(identity, secret)

        if not verified:
            logger.warning("Credential check failed", identity_hash=hash_identity(identity))
            raise InvalidCredentials()

        issued = await self._issue_and_deliver(identity)

        flow.identity = identity
        flow.remember = remember
        flow.code_expires_at = issued.expires_at
        flow.state = LoginState.AWAITING_CODE
        return issued

    async def resend_code(
        self,
        flow: LoginFlow,
        origin: Optional[str] = None,
    ) -> CodeIssued:
        """
        Issue a fresh code, invalidating the previous one.

        Raises:
            Throttled: Too many resend attempts
            InfrastructureError: A store or collaborator failed
        """
        self._require(flow, LoginState.AWAITING_CODE)

        await self._throttle("resend", flow.identity, origin)

        issued = await self._issue_and_deliver(flow.identity)
        flow.code_expires_at = issued.expires_at
        return issued

    async def submit_code(
        self,
        flow: LoginFlow,
        code: str,
        origin: Optional[str] = None,
    ) -> LoginFlow:
        """
        Verify and consume a code, then open the host session.

        Failures leave the flow where it was, except once the code is
        consumed: a rejected or failed session sends the flow back to the
        credentials step.

        Raises:
            Throttled: Too many code submissions
            InvalidCode: No such code for this flow, or already used
            ExpiredCode: The code's TTL elapsed
            PolicyRejected: The host refused the session
            InfrastructureError: A store or collaborator failed
        """
        if flow.state is LoginState.AWAITING_CREDENTIALS:
            raise InvalidTransition("Credentials must be submitted before a code")

        identity = flow.identity
        await self._throttle("verify", identity, origin)

        with _collaborator("code_store"):
            record = await self.code_store.lookup(code.strip())

        if record is None or record.identity != identity:
            logger.warning("Invalid code submitted", identity_hash=hash_identity(identity))
            raise InvalidCode()

        if not self.code_store.is_valid(record):
            logger.info("Expired code submitted", identity_hash=hash_identity(identity))
            raise ExpiredCode()

        with _collaborator("code_store"):
            consumed = await self.code_store.consume(record)

        if not consumed:
            # Lost a race against another submission or a resend
            raise InvalidCode()

        flow.state = LoginState.AUTHENTICATED
        logger.info("Code verified", identity_hash=hash_identity(identity))

        try:
            with _collaborator("session_establisher"):
                decision = await self.sessions.establish(identity, remember=flow.remember)
        except OTPLoginError:
            # The code is spent; only a full restart can recover
            flow.reset()
            raise

        if decision is not SessionDecision.ALLOWED:
            logger.warning("Session rejected by host policy", identity_hash=hash_identity(identity))
            flow.reset()
            raise PolicyRejected()

        return flow

    def go_back(self, flow: LoginFlow) -> LoginFlow:
        """Return from the code step to the credentials step."""
        self._require(flow, LoginState.AWAITING_CODE)
        flow.reset()
        return flow

    def _require(self, flow: LoginFlow, state: LoginState) -> None:
        if flow.state is not state:
            raise InvalidTransition(
                f"Expected flow in {state.value}, found {flow.state.value}"
            )

    async def _throttle(self, action: str, identity: str, origin: Optional[str]) -> None:
        key = self.rate_limiter.get_key(action, identity, origin)

        with _collaborator("rate_limiter"):
            info = await self.rate_limiter.attempt(key, self.config.max_attempts)

        if not info.allowed:
            retry_after = info.retry_after or self.rate_limiter.window
            logger.warning(
                "Attempt throttled",
                action=action,
                identity_hash=hash_identity(identity),
                retry_after=retry_after,
            )
            raise Throttled(retry_after)

    async def _issue_and_deliver(self, identity: str) -> CodeIssued:
        ttl = self.config.code_ttl

        for _ in range(ISSUE_ATTEMPTS):
            code = await self.generator.generate()
            try:
                with _collaborator("code_store"):
                    record = await self.code_store.issue(identity, code, ttl)
                break
            except CodeCollisionError:
                continue
        else:
            raise CodeSpaceExhausted(self.config.code_length, ISSUE_ATTEMPTS)

        logger.info(
            "OTP code issued",
            identity_hash=hash_identity(identity),
            expires_in=ttl,
        )

        delivered = True
        try:
            with _collaborator("delivery_channel"):
                await self.delivery.notify(identity, record.code)
        except InfrastructureError:
            if self.config.strict_delivery:
                raise
            delivered = False

        return CodeIssued(
            identity=identity,
            expires_at=record.expires_at,
            ttl_seconds=ttl,
            delivered=delivered,
        )
