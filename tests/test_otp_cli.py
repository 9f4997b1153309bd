"""Tests for the mfa-totp command line wrapper."""

from __future__ import annotations

import json
import re

from mfa_totp.otp_cli import build_parser, main
from mfa_totp.totp_service import TotpService

RFC_SECRET_B32 = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "usage: mfa-totp" in capsys.readouterr().out


def test_parser_defaults():
    args = build_parser().parse_args(["verify", "--secret", "ABCD", "--code", "123456"])
    assert args.window == 1
    assert args.verbose is False


def test_init_prints_enrollment(capsys):
    assert main(["init", "--account", "alice@example.com", "--issuer", "Demo"]) == 0
    out = capsys.readouterr().out
    assert "Manual entry:" in out
    assert "otpauth://totp/Demo:alice%40example.com?secret=" in out
    assert "authenticator app" in out


def test_init_json_with_qr_file(capsys, tmp_path):
    qr_file = tmp_path / "qr.svg"
    assert main(["init", "--account", "bob", "--json", "--qr-out", str(qr_file)]) == 0
    data = json.loads(capsys.readouterr().out)
    assert len(data["secret"]) == 32
    assert data["manual_entry_key"].replace(" ", "") == data["secret"]
    assert data["otpauth_uri"].startswith("otpauth://totp/OAuth%20and%20MFA%20Demo:bob?")
    assert data["qr_code"] == str(qr_file)
    assert "<svg" in qr_file.read_text(encoding="utf-8")


def test_init_json_inlines_svg_without_qr_file(capsys):
    assert main(["init", "--account", "bob", "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert "<svg" in data["qr_code"]


def test_code_prints_current_code(capsys):
    assert main(["code", "--secret", RFC_SECRET_B32]) == 0
    out = capsys.readouterr().out
    assert re.match(r"TOTP: \d{6}  \(valid ~[ \d]\ds\)", out)


def test_verify_valid_code(capsys):
    code = TotpService().generate_code(RFC_SECRET_B32)
    assert main(["verify", "--secret", RFC_SECRET_B32, "--code", code]) == 0
    assert "VALID" in capsys.readouterr().out


def test_verify_invalid_code(capsys):
    assert main(["verify", "--secret", RFC_SECRET_B32, "--code", "abcdef"]) == 1
    assert "INVALID" in capsys.readouterr().out


def test_verify_malformed_code(capsys):
    assert main(["verify", "--secret", RFC_SECRET_B32, "--code", "12", "--verbose"]) == 1
    assert "INVALID" in capsys.readouterr().out
