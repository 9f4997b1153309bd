#!/usr/bin/env python3
"""
otp_cli.py — CLI wrapper around TotpService.

Subcommands:
- init   : create a secret for an account, print manual key + otpauth URI
- code   : print the current TOTP code for a secret
- verify : check a TOTP code against a secret

Secrets are passed in and printed out; nothing is written to disk unless
--qr-out is given, and that file only holds the QR SVG.
"""

import argparse
import json
import logging
import sys
import time

from .otp_core import DEFAULT_APP_NAME, DEFAULT_WINDOW
from .totp_service import TotpService

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )


# --- CLI command handlers ---
def cmd_init(args) -> int:
    service = TotpService()
    artifact = service.generate_secret(args.account, args.issuer)

    if args.qr_out:
        with open(args.qr_out, "w", encoding="utf-8") as f:
            f.write(artifact.qr_code)
        logger.info("QR code written to %s", args.qr_out)

    if args.json:
        data = artifact.to_dict()
        # inline SVG unless it went to --qr-out
        if args.qr_out:
            data["qr_code"] = args.qr_out
        print(json.dumps(data, indent=2))
        return 0

    print(f"[*] Secret for '{args.account}' ({args.issuer}):")
    print("    Secret      :", artifact.secret)
    print("    Manual entry:", artifact.manual_entry_key)
    print("    TOTP URI    :", artifact.otpauth_uri)
    if args.qr_out:
        print("    QR code     :", args.qr_out)
    print(artifact.instructions)
    return 0


def cmd_code(args) -> int:
    service = TotpService()
    if not args.watch:
        print(f"TOTP: {service.generate_code(args.secret)}  (valid ~{service.remaining_seconds():2d}s)")
        return 0

    print("Press Ctrl+C to quit. Generating TOTP in real time...\n")
    last_code = None
    try:
        while True:
            code = service.generate_code(args.secret)
            remaining = service.remaining_seconds()
            if code != last_code:
                print(f"TOTP: {code}  (valid ~{remaining:2d}s)")
                last_code = code
            else:
                print(f".. {remaining:2d}s left", end='\r', flush=True)
            time.sleep(1)
    except KeyboardInterrupt:
        print("\nBye.")
    return 0


def cmd_verify(args) -> int:
    service = TotpService()
    if service.validate_code(args.secret, args.code, window_steps=args.window):
        print("[+] TOTP code is VALID")
        return 0
    print("[-] TOTP code is INVALID")
    return 1


def cmd_help(args) -> int:
    args.parser.print_help()
    return 0


# --- Argparse builder ---
def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="mfa-totp", description="TOTP (RFC 6238) enrollment and verification tool")
    sub = p.add_subparsers(dest="cmd")
    p.set_defaults(func=cmd_help, parser=p, verbose=False)

    # init
    pi = sub.add_parser("init", help="Generate a secret and enrollment details for an account")
    pi.add_argument("--account", required=True, help="Account label for the otpauth URI (e.g. email)")
    pi.add_argument("--issuer", default=DEFAULT_APP_NAME, help="Issuer label for the otpauth URI")
    pi.add_argument("--qr-out", metavar="FILE", help="Write the QR code SVG to FILE")
    pi.add_argument("--json", action="store_true", help="Print the enrollment artifact as JSON (qr_code holds the SVG, or the --qr-out path)")
    pi.add_argument("--verbose", action="store_true", help="Verbose output")
    pi.set_defaults(func=cmd_init)

    # code
    pc = sub.add_parser("code", help="Show the current TOTP code for a secret")
    pc.add_argument("--secret", required=True, help="Base32 secret (spaces allowed)")
    pc.add_argument("--watch", action="store_true", help="Refresh every second until Ctrl+C")
    pc.add_argument("--verbose", action="store_true", help="Verbose output")
    pc.set_defaults(func=cmd_code)

    # verify
    pv = sub.add_parser("verify", help="Verify a TOTP code")
    pv.add_argument("--secret", required=True, help="Base32 secret (spaces allowed)")
    pv.add_argument("--code", required=True, help="OTP code to verify")
    pv.add_argument("--window", type=int, default=DEFAULT_WINDOW, help="Allowed +/- step window")
    pv.add_argument("--verbose", action="store_true", help="Verbose output")
    pv.set_defaults(func=cmd_verify)

    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
