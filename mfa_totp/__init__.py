"""
mfa_totp package
================

TOTP (RFC 6238) engine for MFA enrollment and login.

──────────────────────────────────────────────
Core algorithm
──────────────────────────────────────────────
- HOTP (RFC 4226):
  code = Truncate(HMAC-SHA1(key=secret, msg=counter)) mod 10^6
- TOTP (RFC 6238):
  HOTP with counter = floor(unix_time / 30)
- Validation accepts the current step +/- 1 by default to absorb clock skew.

──────────────────────────────────────────────
Quick usage
──────────────────────────────────────────────
    from mfa_totp import TotpService

    service = TotpService()
    artifact = service.generate_secret("alice@example.com", "MyService")
    artifact.manual_entry_key      # "ABCD EFGH ..." for typing by hand
    artifact.qr_code               # SVG markup for the otpauth:// URI
    ok = service.validate_code(artifact.secret, user_input)

The engine never stores the secret; persisting `artifact.secret` is up to
the caller.
"""

from .otp_core import (
    base32_decode,
    base32_encode,
    format_otpauth_uri,
    format_secret_for_manual_entry,
    generate_code,
)
from .qr_render import render_qr_svg
from .totp_service import AuthenticationResult, EnrollmentArtifact, TotpService

__version__ = "0.1.0"

__all__ = [
    "AuthenticationResult",
    "EnrollmentArtifact",
    "TotpService",
    "base32_decode",
    "base32_encode",
    "format_otpauth_uri",
    "format_secret_for_manual_entry",
    "generate_code",
    "render_qr_svg",
]
