from pathlib import Path

import pytest

from tunelink.auth.models.flow import GrantKind
from tunelink.config import ClientConfig

ENV_VARS = [
    "TUNELINK_CLIENT_ID",
    "TUNELINK_REDIRECT_URI",
    "TUNELINK_SCOPES",
    "TUNELINK_GRANT",
    "TUNELINK_STORAGE_PATH",
    "TUNELINK_TIMEOUT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep a developer's .env out of the picture.
    monkeypatch.chdir(tmp_path)


class TestClientConfig:
    def test_defaults(self):
        config = ClientConfig(client_id="client-456")

        assert config.redirect_uri == "http://127.0.0.1:3000/"
        assert config.grant_kind is GrantKind.AUTHORIZATION_CODE_WITH_PKCE
        assert config.scopes == {}
        assert config.scope is None
        assert config.verifier_length == 64
        assert config.search_limit == 10

    def test_scope_joins_names(self):
        config = ClientConfig(
            client_id="client-456",
            scopes={"user-read-private": "", "user-read-email": ""},
        )

        assert config.scope == "user-read-private user-read-email"

    @pytest.mark.parametrize(
        "kwargs",
        [{"client_id": ""}, {"verifier_length": 42}, {"search_limit": 0}, {"search_limit": 51}],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            ClientConfig(**{"client_id": "client-456", **kwargs})


class TestFromEnv:
    def test_reads_environment(self, monkeypatch, tmp_path):
        # Arrange
        monkeypatch.setenv("TUNELINK_CLIENT_ID", "client-456")
        monkeypatch.setenv("TUNELINK_REDIRECT_URI", "http://localhost:8080/")
        monkeypatch.setenv("TUNELINK_SCOPES", "user-read-email, custom-scope")
        monkeypatch.setenv("TUNELINK_GRANT", "implicit")
        monkeypatch.setenv("TUNELINK_STORAGE_PATH", str(tmp_path / "s.json"))
        monkeypatch.setenv("TUNELINK_TIMEOUT", "5")

        # Act
        config = ClientConfig.from_env()

        # Assert
        assert config.client_id == "client-456"
        assert config.redirect_uri == "http://localhost:8080/"
        assert config.scopes == {
            "user-read-email": "the account email address",
            "custom-scope": "",
        }
        assert config.grant_kind is GrantKind.IMPLICIT_FRAGMENT
        assert config.storage_path == Path(tmp_path / "s.json")
        assert config.timeout == 5.0

    def test_reads_dotenv_file(self, tmp_path):
        # Arrange
        env_file = tmp_path / "custom.env"
        env_file.write_text("TUNELINK_CLIENT_ID=from-dotenv\n")

        # Act
        config = ClientConfig.from_env(str(env_file))

        # Assert
        assert config.client_id == "from-dotenv"

    def test_missing_client_id(self):
        with pytest.raises(ValueError, match="TUNELINK_CLIENT_ID"):
            ClientConfig.from_env()

    def test_unknown_grant(self, monkeypatch):
        monkeypatch.setenv("TUNELINK_CLIENT_ID", "client-456")
        monkeypatch.setenv("TUNELINK_GRANT", "password")

        with pytest.raises(ValueError, match="TUNELINK_GRANT"):
            ClientConfig.from_env()
