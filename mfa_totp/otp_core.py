"""
otp_core.py — TOTP primitives (RFC 4226 / RFC 6238) and Base32 codec.

Pure functions only: no I/O, no clock reads, no randomness. The stateful
edges (random source, QR encoder, wall clock) live in totp_service.py and are
injected there.

Algorithm summary:
- HOTP:  code = Truncate(HMAC-SHA1(key=secret, msg=counter)) mod 10^digits
- TOTP:  HOTP with counter = floor(unix_time / period), period = 30s
- Dynamic truncation: offset = last byte & 0x0F, take 4 bytes from offset,
  clear the top bit, read as a 31-bit big-endian integer.
"""

import base64
import hashlib
import hmac
import struct
from urllib.parse import quote

# --- Config / constants ----------------------------------------------------
DEFAULT_DIGITS = 6          # authenticator apps expect 6
DEFAULT_TIME_STEP = 30      # seconds per TOTP step
DEFAULT_WINDOW = 1          # +/- steps accepted during validation
SECRET_BYTES = 20           # 160-bit secret
BASE32_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"
MANUAL_ENTRY_GROUP = 4
DEFAULT_APP_NAME = "OAuth and MFA Demo"
ENROLLMENT_INSTRUCTIONS = "Scan the QR code or manually enter the key in your authenticator app"
QR_ERROR_CORRECTION = "H"

_BASE32_INDEX = {symbol: value for value, symbol in enumerate(BASE32_ALPHABET)}


# --- Base32 ----------------------------------------------------------------
def base32_encode(data: bytes) -> str:
    """
    Encode bytes as unpadded, uppercase Base32 (RFC 4648 alphabet).

    - base64.b32encode gives the standard text; trailing '=' padding is
      dropped because authenticator apps and otpauth URIs expect none.

    Arguments:
        data: arbitrary byte sequence (empty -> "")

    Returns:
        str: Base32 text, e.g. b"\\x00" -> "AA"
    """
    return base64.b32encode(data).decode("ascii").rstrip("=")


def base32_decode(text: str) -> bytes:
    """
    Decode Base32 text back into bytes, leniently.

    - Case-insensitive, one character at a time (ASCII only, so 'ß' never
      expands into "SS").
    - Characters outside the alphabet (spaces, '=' padding, dashes, typos
      like '!') are skipped, not rejected, so hand-typed secrets still work.
    - Low bits of a trailing partial byte are discarded.

    Arguments:
        text: Base32 string (None or "" -> b"")

    Returns:
        bytes: decoded key material
    """
    if not text:
        return b""

    out = bytearray()
    buffer = 0
    bits_left = 0
    for char in text:
        value = _BASE32_INDEX.get(char.upper()) if char.isascii() else None
        if value is None:
            continue
        buffer = ((buffer << 5) | value) & 0xFFF
        bits_left += 5
        if bits_left >= 8:
            out.append((buffer >> (bits_left - 8)) & 0xFF)
            bits_left -= 8

    return bytes(out)


# --- RFC helpers -----------------------------------------------------------
def int_to_bytes(i: int) -> bytes:
    """
    Counter -> 8-byte big-endian, as RFC 4226 requires.

    Example: int_to_bytes(1) -> b'\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x01'
    """
    return struct.pack(">Q", i)


def dynamic_truncate(hmac_digest: bytes) -> int:
    """
    RFC 4226 dynamic truncation of an HMAC digest to a 31-bit integer.

    Raises:
        IndexError: if the digest is shorter than offset + 4
    """
    # offset is 0..15, SHA-1 digest is 20 bytes
    offset = hmac_digest[-1] & 0x0F
    return (
        ((hmac_digest[offset] & 0x7F) << 24)
        | ((hmac_digest[offset + 1] & 0xFF) << 16)
        | ((hmac_digest[offset + 2] & 0xFF) << 8)
        | (hmac_digest[offset + 3] & 0xFF)
    )


def generate_code(secret_bytes: bytes, time_step: int, digits: int = DEFAULT_DIGITS) -> str:
    """
    Compute the one-time code for a raw secret and a counter / time step.

    Steps:
    1. message = 8-byte big-endian time_step
    2. digest = HMAC-SHA1(key=secret_bytes, message)
    3. dbc = dynamic_truncate(digest)
    4. code = dbc mod 10^digits, zero-padded to `digits`

    Pure: identical inputs always give the identical code.

    Arguments:
        secret_bytes: decoded secret (not Base32 text)
        time_step: non-negative counter
        digits: code width

    Returns:
        str: e.g. "094287"
    """
    msg = int_to_bytes(time_step)
    digest = hmac.new(secret_bytes, msg, hashlib.sha1).digest()
    dbc = dynamic_truncate(digest)
    return str(dbc % (10 ** digits)).zfill(digits)


def current_time_step(timestamp: float, period: int = DEFAULT_TIME_STEP) -> int:
    """floor(timestamp / period)."""
    if period <= 0:
        raise ValueError("period must be a positive number of seconds")
    return int(timestamp // period)


def seconds_remaining(timestamp: float, period: int = DEFAULT_TIME_STEP) -> int:
    """Whole seconds until the step containing `timestamp` rolls over."""
    if period <= 0:
        raise ValueError("period must be a positive number of seconds")
    return int(period - (int(timestamp) % period))


# --- Enrollment formatting -------------------------------------------------
def format_secret_for_manual_entry(secret_b32: str, group: int = MANUAL_ENTRY_GROUP) -> str:
    """
    Split a Base32 secret into space-separated groups for manual typing.

    "JBSWY3DPEHPK3PXP" -> "JBSW Y3DP EHPK 3PXP"; the last group may be shorter.
    """
    return " ".join(secret_b32[i:i + group] for i in range(0, len(secret_b32), group))


def format_otpauth_uri(
    secret_b32: str,
    account: str,
    issuer: str,
    digits: int = DEFAULT_DIGITS,
    period: int = DEFAULT_TIME_STEP,
) -> str:
    """
    Build the otpauth:// URI that authenticator apps import.

    otpauth://totp/{issuer}:{account}?secret=...&issuer=...&digits=...&period=...

    Issuer and account are percent-encoded as URI data components, so only
    unreserved characters (A-Z a-z 0-9 - . _ ~) survive as-is; the ':' between
    them is the literal label separator.
    """
    issuer_enc = quote(issuer, safe="")
    account_enc = quote(account, safe="")
    return (
        f"otpauth://totp/{issuer_enc}:{account_enc}?secret={secret_b32}&issuer={issuer_enc}"
        f"&digits={digits}&period={period}"
    )
