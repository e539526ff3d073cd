from fastapi import status
from fastapi.testclient import TestClient


def test_api_healthcheck(client: TestClient):
    response = client.get('/healthcheck/api')
    assert response.status_code == status.HTTP_200_OK


def test_database_healthcheck(client: TestClient):
    response = client.get('/healthcheck/database')
    assert response.status_code == status.HTTP_200_OK
    assert 'happy' in response.text
