# SPDX-License-Identifier: GPL-3.0-or-later
from __future__ import annotations

import base64
import json
from typing import Any, Dict

import pytest

import gdrive_upload.auth as auth
from gdrive_upload.exceptions import ConfigError, CredentialFormatError


def _b64(text: str | bytes) -> str:
    raw = text.encode("utf-8") if isinstance(text, str) else text
    return base64.b64encode(raw).decode("ascii")


def test_decode_roundtrips_service_account_json(encoded_credentials: str, sa_info: Dict[str, Any]):
    assert auth.decode_service_account_info(encoded_credentials) == sa_info


def test_decode_ignores_line_wrapping(encoded_credentials: str, sa_info: Dict[str, Any]):
    wrapped = "\n".join(encoded_credentials[i : i + 76] for i in range(0, len(encoded_credentials), 76))
    assert auth.decode_service_account_info(wrapped + "\n") == sa_info


@pytest.mark.parametrize(
    "encoded",
    [
        "",
        "   ",
        "not-valid-base64-json",
        _b64(b"\xff\xfe\x00binary"),
        _b64("{not json"),
        _b64("[1, 2, 3]"),
        _b64('"just a string"'),
    ],
)
def test_decode_rejects_malformed_payloads(encoded: str):
    with pytest.raises(CredentialFormatError):
        auth.decode_service_account_info(encoded)


@pytest.mark.parametrize("missing", ["client_email", "private_key"])
def test_decode_requires_email_and_key(sa_info: Dict[str, Any], missing: str):
    sa_info.pop(missing)
    with pytest.raises(CredentialFormatError) as ei:
        auth.decode_service_account_info(_b64(json.dumps(sa_info)))
    assert missing in str(ei.value)


def test_decode_rejects_empty_private_key(sa_info: Dict[str, Any]):
    sa_info["private_key"] = ""
    with pytest.raises(CredentialFormatError):
        auth.decode_service_account_info(_b64(json.dumps(sa_info)))


def test_credential_format_error_is_a_config_error():
    assert issubclass(CredentialFormatError, ConfigError)


def test_error_message_does_not_leak_key_material(sa_info: Dict[str, Any]):
    sa_info.pop("client_email")
    with pytest.raises(CredentialFormatError) as ei:
        auth.decode_service_account_info(_b64(json.dumps(sa_info)))
    assert "PRIVATE KEY" not in str(ei.value)


def test_build_credentials_uses_drive_file_scope_only(monkeypatch: pytest.MonkeyPatch, sa_info: Dict[str, Any]):
    captured: Dict[str, Any] = {}

    def _fake_from_info(info: Dict[str, Any], scopes: Any = None, **_kw: Any) -> object:
        captured["info"] = info
        captured["scopes"] = scopes
        return object()

    monkeypatch.setattr(auth.service_account.Credentials, "from_service_account_info", _fake_from_info)
    auth.build_credentials(sa_info)

    assert captured["scopes"] == ["https://www.googleapis.com/auth/drive.file"]
    assert captured["info"]["token_uri"] == auth.DEFAULT_TOKEN_URI
    assert captured["info"]["client_email"] == sa_info["client_email"]
    # il mapping di input non viene modificato
    assert "token_uri" not in sa_info


def test_build_credentials_keeps_explicit_token_uri(monkeypatch: pytest.MonkeyPatch, sa_info: Dict[str, Any]):
    captured: Dict[str, Any] = {}
    monkeypatch.setattr(
        auth.service_account.Credentials,
        "from_service_account_info",
        lambda info, scopes=None, **_kw: captured.setdefault("info", info),
    )
    sa_info["token_uri"] = "https://example.test/token"
    auth.build_credentials(sa_info)
    assert captured["info"]["token_uri"] == "https://example.test/token"


def test_build_credentials_with_unparsable_key_raises(sa_info: Dict[str, Any]):
    # chiave PEM finta: la libreria non riesce a costruire il signer
    with pytest.raises(CredentialFormatError) as ei:
        auth.build_credentials(sa_info)
    assert "MIIEfake" not in str(ei.value)


def test_build_drive_service_wraps_library_failures(monkeypatch: pytest.MonkeyPatch):
    def _boom(*_a: Any, **_kw: Any) -> Any:
        raise RuntimeError("discovery unavailable")

    monkeypatch.setattr(auth, "build", _boom)
    with pytest.raises(ConfigError):
        auth.build_drive_service(object())


def test_build_drive_service_passes_credentials(monkeypatch: pytest.MonkeyPatch):
    seen: Dict[str, Any] = {}

    def _fake_build(name: str, version: str, **kw: Any) -> str:
        seen.update(name=name, version=version, **kw)
        return "service"

    creds = object()
    monkeypatch.setattr(auth, "build", _fake_build)
    assert auth.build_drive_service(creds) == "service"
    assert seen["name"] == "drive" and seen["version"] == "v3"
    assert seen["credentials"] is creds
    assert seen["cache_discovery"] is False


def test_public_surface_is_decode_build_credentials_build_service():
    assert set(auth.__all__) == {
        "DRIVE_FILE_SCOPE",
        "SCOPES",
        "decode_service_account_info",
        "build_credentials",
        "build_drive_service",
    }
    assert not hasattr(auth, "drive_service_from_input")
