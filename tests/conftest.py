import pytest

from tunelink.auth.services.storage import CredentialStore, InMemoryStorage
from tunelink.config import ClientConfig


class FakeNavigation:
    """In-memory page location for driving the session controller."""

    def __init__(self, url: str = "http://127.0.0.1:3000/"):
        self.url = url
        self.replaced: list[str] = []
        self.assigned: list[str] = []

    def current_url(self) -> str:
        return self.url

    def replace_url(self, url: str) -> None:
        self.replaced.append(url)
        self.url = url

    def assign(self, url: str) -> None:
        self.assigned.append(url)


class BrokenStorage(InMemoryStorage):
    """Storage whose writes always fail, like a full or disabled disk."""

    def set(self, key: str, value: str) -> None:
        raise OSError("storage is full")


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(
        client_id="client-456",
        redirect_uri="http://127.0.0.1:3000/",
        authorization_endpoint="https://accounts.example.com/authorize",
        token_endpoint="https://accounts.example.com/api/token",
        api_base_url="https://api.example.com/v1",
    )


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def store(storage) -> CredentialStore:
    return CredentialStore(storage)


@pytest.fixture
def navigation_factory():
    return FakeNavigation


@pytest.fixture
def broken_storage() -> BrokenStorage:
    return BrokenStorage()


class LockedStorage(InMemoryStorage):
    """Storage whose entries can be read and written but never removed."""

    def remove(self, key: str) -> None:
        raise OSError("storage is read-only")


@pytest.fixture
def locked_storage() -> LockedStorage:
    return LockedStorage()
