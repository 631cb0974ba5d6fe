"""
Pytest configuration and shared fixtures.
"""
import pytest
from httpx import AsyncClient, ASGITransport

from blockscan.api.main import app, get_ledger_reader, get_wallet_store
from blockscan.infrastructure.gateways.local_mock import InMemoryLedger
from blockscan.infrastructure.persistence.json_wallet import JsonWalletRepo


@pytest.fixture
def ledger():
    return InMemoryLedger()


@pytest.fixture
def wallet_path(tmp_path):
    path = tmp_path / "wallet.json"
    path.write_text("[]")
    return path


@pytest.fixture
def wallet(wallet_path):
    return JsonWalletRepo(wallet_path)


@pytest.fixture
async def client(ledger, wallet):
    """Async HTTP client for the API, wired to the in-memory ledger and a temp wallet."""
    app.dependency_overrides[get_ledger_reader] = lambda: ledger
    app.dependency_overrides[get_wallet_store] = lambda: wallet
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
