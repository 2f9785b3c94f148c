"""Unit tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from cpamm.api.endpoints import get_deployment
from cpamm.api.main import app
from cpamm.library import constant_product
from tests.helpers import ALICE, E18, fund, seed_pool


@pytest.fixture
def client(deployment):
    """Test client serving the test deployment."""
    app.dependency_overrides[get_deployment] = lambda: deployment
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def pools(router, token_a, token_b, token_c):
    """A/B at 1000/1000 and B/C at 1000/2000."""
    for token in (token_a, token_b, token_c):
        fund(token, ALICE, router)
    seed_pool(router, ALICE, token_a, token_b, 1000 * E18, 1000 * E18)
    seed_pool(router, ALICE, token_b, token_c, 1000 * E18, 2000 * E18)


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"


@pytest.mark.usefixtures("pools")
class TestPairsEndpoints:
    """Pool listing and single-pair lookup."""

    def test_list_pairs(self, client):
        response = client.get("/pairs")

        assert response.status_code == 200
        pools = response.json()["pools"]
        assert len(pools) == 2
        # B/C holds more tokens, so it is listed first
        assert {pools[0]["token0"]["symbol"], pools[0]["token1"]["symbol"]} == {"TKB", "TKC"}
        assert "pairAddress" in pools[0]
        assert "totalSupply" in pools[0]

    def test_list_pairs_filtered(self, client):
        response = client.get("/pairs", params={"filter": "tka"})
        pools = response.json()["pools"]
        assert len(pools) == 1

    def test_get_pair(self, client, factory, token_a, token_b):
        address = factory.get_pair(token_a.address, token_b.address)

        response = client.get(f"/pairs/{address}")

        assert response.status_code == 200
        data = response.json()
        assert data["pairAddress"] == address
        assert data["reserve0"] == str(1000 * E18)
        assert data["reserve1"] == str(1000 * E18)

    def test_get_unknown_pair(self, client):
        assert client.get("/pairs/0x" + "12" * 20).status_code == 404

    def test_get_token_is_not_a_pair(self, client, token_a):
        assert client.get(f"/pairs/{token_a.address}").status_code == 404

    def test_get_malformed_address(self, client):
        assert client.get("/pairs/not-an-address").status_code == 404


@pytest.mark.usefixtures("pools")
class TestQuoteEndpoints:
    """Quote endpoints and error mapping."""

    def test_amounts_out(self, client, token_a, token_b, token_c):
        path = [token_a.address, token_b.address, token_c.address]

        response = client.post("/quote/amounts-out", json={"amount": str(E18), "path": path})

        assert response.status_code == 200
        first = constant_product.get_amount_out(E18, 1000 * E18, 1000 * E18)
        second = constant_product.get_amount_out(first, 1000 * E18, 2000 * E18)
        assert response.json()["amounts"] == [str(E18), str(first), str(second)]

    def test_amounts_in(self, client, token_a, token_b):
        response = client.post(
            "/quote/amounts-in",
            json={"amount": str(E18), "path": [token_a.address, token_b.address]},
        )
        assert response.status_code == 200
        amounts = response.json()["amounts"]
        assert amounts[-1] == str(E18)
        assert int(amounts[0]) == constant_product.get_amount_in(E18, 1000 * E18, 1000 * E18)

    def test_missing_pair_is_400(self, client, token_a, token_c):
        response = client.post(
            "/quote/amounts-out",
            json={"amount": str(E18), "path": [token_a.address, token_c.address]},
        )
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "PAIR_DOES_NOT_EXIST"

    def test_draining_output_is_400(self, client, token_a, token_b):
        response = client.post(
            "/quote/amounts-in",
            json={"amount": str(1000 * E18), "path": [token_a.address, token_b.address]},
        )
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "INSUFFICIENT_LIQUIDITY"

    def test_zero_amount_is_400(self, client, token_a, token_b):
        response = client.post(
            "/quote/amounts-out",
            json={"amount": "0", "path": [token_a.address, token_b.address]},
        )
        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "INSUFFICIENT_INPUT_AMOUNT"

    def test_short_path_is_422(self, client, token_a):
        response = client.post(
            "/quote/amounts-out", json={"amount": "1", "path": [token_a.address]}
        )
        assert response.status_code == 422

    def test_invalid_amount_is_422(self, client, token_a, token_b):
        response = client.post(
            "/quote/amounts-out",
            json={"amount": "-5", "path": [token_a.address, token_b.address]},
        )
        assert response.status_code == 422
