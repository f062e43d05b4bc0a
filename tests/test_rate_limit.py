"""
Route tests for the per-IP limit shared by the checkout routes.
"""
import pytest

from shared.security import limiter

CLIENT_A = {"X-Forwarded-For": "203.0.113.9"}
CLIENT_B = {"X-Forwarded-For": "198.51.100.4, 10.0.0.1"}


@pytest.fixture
def limited_client(client, monkeypatch):
    monkeypatch.setenv("CHECKOUT_RATE_LIMIT", "2/minute")
    limiter.enabled = True
    limiter.reset()
    yield client
    limiter.reset()
    limiter.enabled = False


class TestCheckoutRateLimit:

    def test_checkout_routes_share_one_bucket_per_ip(self, limited_client) -> None:
        first = limited_client.post(
            "/create-checkout-session",
            json={"items": [{"product_id": "prod_featured"}]},
            headers=CLIENT_A,
        )
        second = limited_client.post("/credit", json={"email": "new@club.example"}, headers=CLIENT_A)
        third = limited_client.post(
            "/create-bundle-checkout", json={"email": "new@club.example"}, headers=CLIENT_A
        )

        assert first.status_code == 200
        assert second.status_code == 200
        assert third.status_code == 429

    def test_other_ip_is_not_limited(self, limited_client) -> None:
        for _ in range(2):
            assert limited_client.post(
                "/credit", json={"email": "new@club.example"}, headers=CLIENT_A
            ).status_code == 200
        assert limited_client.post(
            "/credit", json={"email": "new@club.example"}, headers=CLIENT_A
        ).status_code == 429

        response = limited_client.post("/credit", json={"email": "new@club.example"}, headers=CLIENT_B)

        assert response.status_code == 200

    def test_limit_is_read_per_request(self, limited_client, monkeypatch) -> None:
        monkeypatch.setenv("CHECKOUT_RATE_LIMIT", "1/minute")

        first = limited_client.post("/credit", json={"email": "new@club.example"}, headers=CLIENT_A)
        second = limited_client.post("/credit", json={"email": "new@club.example"}, headers=CLIENT_A)

        assert first.status_code == 200
        assert second.status_code == 429
