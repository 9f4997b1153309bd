"""
totp_service.py — the TOTP engine used by enrollment and login.

TotpService wires the pure primitives in otp_core.py to three injected
capabilities:

- random_source(n) -> n secure random bytes    (default: os.urandom)
- qr_renderer(text, ecc) -> renderable QR      (default: render_qr_svg)
- clock() -> unix seconds                      (default: time.time)

The service keeps no state between calls, so one instance can be shared
across threads. Failures from the random source or the QR renderer are
never caught here: the caller sees them as-is.
"""

import hmac
import logging
import os
import time
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Optional

from .otp_core import (
    DEFAULT_APP_NAME,
    DEFAULT_DIGITS,
    DEFAULT_TIME_STEP,
    DEFAULT_WINDOW,
    ENROLLMENT_INSTRUCTIONS,
    QR_ERROR_CORRECTION,
    SECRET_BYTES,
    base32_decode,
    base32_encode,
    current_time_step,
    format_otpauth_uri,
    format_secret_for_manual_entry,
    generate_code,
    seconds_remaining,
)
from .qr_render import render_qr_svg

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnrollmentArtifact:
    """Everything a user needs to register the secret in an authenticator app."""

    secret: str
    manual_entry_key: str
    otpauth_uri: str
    instructions: str
    qr_code: Any

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class AuthenticationResult:
    success: bool
    message: str


class TotpService:
    """
    Stateless TOTP engine: secret generation, code generation, validation.

    Digits (6) and period (30s) are fixed because they are baked into the
    otpauth URI authenticator apps import.
    """

    def __init__(
        self,
        random_source: Callable[[int], bytes] = os.urandom,
        qr_renderer: Callable[[str, str], Any] = render_qr_svg,
        clock: Callable[[], float] = time.time,
    ):
        self.random_source = random_source
        self.qr_renderer = qr_renderer
        self.clock = clock

    # --- enrollment --------------------------------------------------------
    def generate_secret(self, user_identifier: str,
                        application_name: str = DEFAULT_APP_NAME) -> EnrollmentArtifact:
        """
        Create a fresh 160-bit secret and the artifacts to enroll it.

        Arguments:
            user_identifier: account label shown in the authenticator (e.g. email)
            application_name: issuer label

        Raises:
            RuntimeError: the random source returned the wrong number of bytes
            Anything raised by random_source or qr_renderer, unchanged.
        """
        raw = self.random_source(SECRET_BYTES)
        if len(raw) != SECRET_BYTES:
            raise RuntimeError(
                f"Random source returned {len(raw)} bytes, expected {SECRET_BYTES}"
            )

        secret = base32_encode(raw)
        uri = format_otpauth_uri(secret, account=user_identifier, issuer=application_name,
                                 digits=DEFAULT_DIGITS, period=DEFAULT_TIME_STEP)
        qr_code = self.qr_renderer(uri, QR_ERROR_CORRECTION)
        logger.debug("Built enrollment artifact for issuer %r", application_name)

        return EnrollmentArtifact(
            secret=secret,
            manual_entry_key=format_secret_for_manual_entry(secret),
            otpauth_uri=uri,
            instructions=ENROLLMENT_INSTRUCTIONS,
            qr_code=qr_code,
        )

    # --- codes -------------------------------------------------------------
    def current_time_step(self) -> int:
        return current_time_step(self.clock(), DEFAULT_TIME_STEP)

    def remaining_seconds(self) -> int:
        """Seconds the current code stays valid (ignoring the skew window)."""
        return seconds_remaining(self.clock(), DEFAULT_TIME_STEP)

    def generate_code(self, secret_b32: str) -> str:
        """Current code for a Base32 secret."""
        return generate_code(base32_decode(secret_b32), self.current_time_step(), DEFAULT_DIGITS)

    def validate_code(self, secret: Optional[str], submitted_code: Optional[str],
                      window_steps: int = DEFAULT_WINDOW) -> bool:
        """
        Check a submitted code against the codes for the current step +/- window.

        window_steps=1 accepts the previous, current and next 30s step (90s in
        total). Widening it widens the brute-force surface just as linearly.

        A missing secret, a missing code or a code that is not exactly 6
        characters is rejected before any decoding or HMAC work. Invalid input
        is a normal negative result, never an exception.

        Raises:
            ValueError: window_steps is negative (checked after the input rejections)
        """
        if not secret:
            logger.debug("Rejected: empty secret")
            return False
        if not submitted_code or len(submitted_code) != DEFAULT_DIGITS:
            logger.debug("Rejected: code missing or not %d characters", DEFAULT_DIGITS)
            return False
        if window_steps < 0:
            raise ValueError("window_steps must be >= 0")

        secret_bytes = base32_decode(secret)
        step = self.current_time_step()
        submitted = submitted_code.encode("utf-8")

        for offset in range(-window_steps, window_steps + 1):
            test_step = step + offset
            # negative counters cannot be packed as unsigned 64-bit
            if test_step < 0:
                continue
            expected = generate_code(secret_bytes, test_step, DEFAULT_DIGITS)
            if hmac.compare_digest(expected.encode("ascii"), submitted):
                logger.debug("Accepted at window offset %+d", offset)
                return True

        logger.debug("Rejected: no match within +/-%d steps", window_steps)
        return False

    def authenticate(self, secret: Optional[str], submitted_code: Optional[str],
                     window_steps: int = DEFAULT_WINDOW) -> AuthenticationResult:
        if self.validate_code(secret, submitted_code, window_steps):
            return AuthenticationResult(success=True, message="Authentication successful")
        return AuthenticationResult(success=False, message="Invalid authentication code")
