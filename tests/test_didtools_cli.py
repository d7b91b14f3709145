"""Tests for the didtools command line."""

import json

import pytest
from typer.testing import CliRunner

from didtools.cli import app

ED25519_PUBLIC_KEY_HEX = "d75a980182b10ab7d54bfed3c964073a0ee172f3daa62325af021a68f707511a"
ED25519_DID = "did:key:z6MktwupdmLXVVqTzCw4i46r4uGyosGXRnR3XjN4Zq7oMMsw"

runner = CliRunner()


class TestKeyCommand:
    def test_creates_did_key(self):
        result = runner.invoke(app, ["key", ED25519_PUBLIC_KEY_HEX])
        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == ED25519_DID

    def test_key_type_option(self):
        result = runner.invoke(app, ["key", "33" * 32, "--key-type", "x25519-pub"])
        assert result.exit_code == 0, result.output
        assert result.stdout.strip().startswith("did:key:z6LS")

    def test_default_key_type_from_environment(self, monkeypatch):
        monkeypatch.setenv("DIDTOOLS_DEFAULT_KEY_TYPE", "X25519")
        result = runner.invoke(app, ["key", "33" * 32])
        assert result.exit_code == 0, result.output
        assert result.stdout.strip().startswith("did:key:z6LS")

    def test_invalid_key_exits_1(self):
        result = runner.invoke(app, ["key", "abc"])
        assert result.exit_code == 1
        assert "Hexadecimal string must have even length" in result.output


class TestWebCommand:
    def test_creates_did_web(self):
        result = runner.invoke(app, ["web", "example.com", "--path", "users/alice"])
        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == "did:web:example.com:users:alice"

    def test_rejects_localhost(self):
        result = runner.invoke(app, ["web", "localhost"])
        assert result.exit_code == 1
        assert "Domain must be a valid FQDN" in result.output


class TestParseAndValidate:
    def test_parse_prints_components(self):
        result = runner.invoke(app, ["parse", "did:web:example.com/path?service=agent#keys-1"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["is_valid"] is True
        assert data["components"]["query"] == {"service": "agent"}

    def test_parse_failure_exits_1(self):
        result = runner.invoke(app, ["parse", "nope"])
        assert result.exit_code == 1
        assert json.loads(result.stdout)["error"] == "Invalid DID format"

    @pytest.mark.parametrize(
        "did, exit_code",
        [("did:web:example.com", 0), ("did:web:localhost", 1), ("did:ethr:0x123", 0)],
    )
    def test_validate_exit_codes(self, did, exit_code):
        result = runner.invoke(app, ["validate", did])
        assert result.exit_code == exit_code

    def test_validate_prints_warnings(self):
        result = runner.invoke(app, ["validate", "did:ethr:0x123"])
        assert json.loads(result.stdout)["warnings"] == ["Method 'ethr' is not officially supported"]

    def test_normalize(self):
        result = runner.invoke(app, ["normalize", "did:web:example.com?a=1&a=2"])
        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == "did:web:example.com?a=2"

    def test_normalize_invalid(self):
        result = runner.invoke(app, ["normalize", "nope"])
        assert result.exit_code == 1
        assert "Cannot normalize invalid DID" in result.output


class TestDocumentCommand:
    def test_did_key_document(self):
        result = runner.invoke(app, ["document", ED25519_DID])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["verificationMethod"][0]["type"] == "Multikey"
        assert data["authentication"] == [data["verificationMethod"][0]["id"]]

    def test_did_web_document_with_service(self):
        result = runner.invoke(
            app,
            ["document", "did:web:example.com", "--service", "#agent=AgentService=https://example.com/a", "--json"],
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert "@context" not in data
        assert data["service"] == [
            {"id": "did:web:example.com#agent", "type": "AgentService", "serviceEndpoint": "https://example.com/a"}
        ]

    def test_malformed_service_option(self):
        result = runner.invoke(app, ["document", "did:web:example.com", "--service", "broken"])
        assert result.exit_code == 1
        assert "ID=TYPE=ENDPOINT" in result.output
