"""Tests for credential storage."""

import json
import os
import stat

import pytest

from tunelink.auth.models.errors import StorageUnavailableError
from tunelink.auth.services.storage import (
    CODE_VERIFIER_KEY,
    TOKEN_KEY,
    CredentialStore,
    InMemoryStorage,
    JsonFileStorage,
)


class TestCredentialStore:
    def setup_method(self):
        # Arrange
        self.storage = InMemoryStorage()
        self.store = CredentialStore(self.storage)

    def test_set_get_remove_round_trip(self):
        # Act
        self.store.set(TOKEN_KEY, "token-abc")

        # Assert
        assert self.store.get(TOKEN_KEY) == "token-abc"
        assert self.store.token == "token-abc"

        self.store.remove(TOKEN_KEY)
        assert self.store.get(TOKEN_KEY) is None

    def test_empty_value_reads_as_absent(self):
        self.storage.set(TOKEN_KEY, "")
        assert self.store.get(TOKEN_KEY) is None

    def test_clear_removes_token_and_verifier(self):
        # Arrange
        self.store.set(TOKEN_KEY, "token-abc")
        self.store.set(CODE_VERIFIER_KEY, "v" * 64)

        # Act
        self.store.clear()

        # Assert
        assert TOKEN_KEY not in self.storage
        assert CODE_VERIFIER_KEY not in self.storage

    def test_unknown_keys_are_rejected(self):
        with pytest.raises(KeyError):
            self.store.set("refresh_token", "nope")

    def test_write_failure_raises_storage_unavailable(self, broken_storage):
        # Arrange
        store = CredentialStore(broken_storage)

        # Act & Assert
        with pytest.raises(StorageUnavailableError) as exc_info:
            store.set(CODE_VERIFIER_KEY, "v" * 64)

        assert isinstance(exc_info.value.__cause__, OSError)


class TestJsonFileStorage:
    def test_values_survive_a_new_instance(self, tmp_path):
        # Arrange
        path = tmp_path / "nested" / "storage.json"
        JsonFileStorage(path).set(TOKEN_KEY, "token-abc")

        # Act
        reopened = JsonFileStorage(path)

        # Assert
        assert reopened.get(TOKEN_KEY) == "token-abc"
        assert json.loads(path.read_text()) == {TOKEN_KEY: "token-abc"}

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permissions only")
    def test_file_is_private_to_owner(self, tmp_path):
        path = tmp_path / "storage.json"
        JsonFileStorage(path).set(TOKEN_KEY, "token-abc")

        mode = stat.S_IMODE(path.stat().st_mode)
        assert mode == stat.S_IRUSR | stat.S_IWUSR

    def test_remove_keeps_other_entries(self, tmp_path):
        # Arrange
        storage = JsonFileStorage(tmp_path / "storage.json")
        storage.set(TOKEN_KEY, "token-abc")
        storage.set(CODE_VERIFIER_KEY, "verifier")

        # Act
        storage.remove(CODE_VERIFIER_KEY)
        storage.remove("never-stored")

        # Assert
        assert storage.get(TOKEN_KEY) == "token-abc"
        assert storage.get(CODE_VERIFIER_KEY) is None

    def test_corrupt_file_reads_as_empty(self, tmp_path):
        # Arrange
        path = tmp_path / "storage.json"
        path.write_text("{not json")

        # Act & Assert
        assert JsonFileStorage(path).get(TOKEN_KEY) is None

    def test_missing_file_reads_as_empty(self, tmp_path):
        assert JsonFileStorage(tmp_path / "absent.json").get(TOKEN_KEY) is None
