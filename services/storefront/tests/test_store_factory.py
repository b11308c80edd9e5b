import pytest

from services.storefront.app.services.store_factory import get_store_client
from services.storefront.app.services.store_http import HttpStoreClient


def test_get_store_client_defaults_to_mock(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("STOREFRONT_STORE_CLIENT", raising=False)
    client = get_store_client()
    assert client.backend == "MOCK"


def test_get_store_client_http_reads_base_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STOREFRONT_STORE_CLIENT", "http")
    monkeypatch.setenv("STOREFRONT_API_BASE", "https://store.example.com/")
    client = get_store_client()
    assert isinstance(client, HttpStoreClient)
    assert client.base_url == "https://store.example.com"


def test_get_store_client_rejects_unknown(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STOREFRONT_STORE_CLIENT", "nope")
    with pytest.raises(ValueError, match="Unknown STOREFRONT_STORE_CLIENT"):
        get_store_client()
