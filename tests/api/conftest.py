import pytest
from fastapi.testclient import TestClient

from passcode.core.mfa.service import MfaService


@pytest.fixture(autouse=True)
def _database(db):
    yield db


@pytest.fixture(scope='function')
def client(mfa_service) -> TestClient:
    """
    Client whose MFA routes use the test service: frozen clock,
    in memory user directory and mocked delivery clients
    """
    from passcode.network.http.server import server

    server.dependency_overrides[MfaService.factory] = lambda: mfa_service
    with TestClient(server) as test_client:
        yield test_client

    server.dependency_overrides.clear()
