"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from ethosradar.api.app import create_app
from ethosradar.services.r4r_analyzer import R4RAnalyzer

SUBJECT = "profileId:1"


@pytest.fixture
def build_client(make_source, cache):
    def _build(reviews=(), failing=()):
        source = make_source(list(reviews), failing=failing)
        client = TestClient(create_app(R4RAnalyzer(source=source, cache=cache)))
        return client, source
    return _build


class TestHealth:

    def test_health(self, build_client):
        client, _ = build_client()
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestR4RAnalysisEndpoint:

    def test_analysis(self, build_client, review):
        client, _ = build_client(review.exchange(SUBJECT, "profileId:2", gap_minutes=5))
        response = client.get(f"/api/r4r-analysis/{SUBJECT}")
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert "cached" not in body
        data = body["data"]
        assert data["userkey"] == SUBJECT
        assert data["reciprocalReviews"] == 1
        assert data["quickReciprocalCount"] == 1
        assert data["riskLevel"] == "Critical"
        assert data["networkConnections"][0]["userkey"] == "profileId:2"
        assert len(data["allReviews"]) == 2

    def test_second_request_is_cached(self, build_client, review):
        client, source = build_client(review.exchange(SUBJECT, "profileId:2", gap_minutes=5))
        first = client.get(f"/api/r4r-analysis/{SUBJECT}").json()
        second = client.get(f"/api/r4r-analysis/{SUBJECT}").json()
        assert second["cached"] is True
        assert second["data"] == first["data"]
        assert source.fetch_calls[SUBJECT] == 1

    def test_insufficient_data_is_404(self, build_client):
        client, _ = build_client()
        response = client.get(f"/api/r4r-analysis/{SUBJECT}")
        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_upstream_failure_is_503(self, build_client):
        client, _ = build_client(failing={SUBJECT})
        response = client.get(f"/api/r4r-analysis/{SUBJECT}")
        assert response.status_code == 503
        assert response.json()["error"] == "Review data source unavailable"


class TestSummaryEndpoints:

    def test_r4r_summary(self, build_client, review):
        raws = review.exchange(SUBJECT, "profileId:2", gap_minutes=5)
        raws.append(review("profileId:3", SUBJECT, score="negative"))
        client, _ = build_client(raws)
        data = client.get(f"/api/r4r-summary/{SUBJECT}").json()["data"]
        assert data["available"] is True
        assert data["totalReviews"] == 2
        assert data["positivePercentage"] == 50
        assert data["reciprocalReviews"] == 1

    def test_r4r_summary_without_data(self, build_client):
        client, _ = build_client()
        response = client.get(f"/api/r4r-summary/{SUBJECT}")
        assert response.status_code == 200
        assert response.json()["data"]["available"] is False

    def test_review_summary(self, build_client, review):
        raws = [review("profileId:2", SUBJECT), review("profileId:3", SUBJECT, score="negative")]
        client, _ = build_client(raws)
        data = client.get(f"/api/review-summary/{SUBJECT}").json()["data"]
        assert data == {"totalReviews": 2, "positivePercentage": 50}

    def test_summary_upstream_failure(self, build_client):
        client, _ = build_client(failing={SUBJECT})
        assert client.get(f"/api/r4r-summary/{SUBJECT}").status_code == 503


class TestNetworkEndpoint:

    def test_network_analysis(self, build_client, review):
        client, _ = build_client(review.exchange("profileId:a", "profileId:b", gap_minutes=2))
        response = client.post("/api/r4r-network-analysis",
                               json={"userkeys": ["profileId:a", "profileId:b"]})
        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data["analyses"]) == 2
        assert len(data["crossConnections"]) == 1
        assert data["crossConnections"][0]["isMutual"] is True
        assert data["networkSuspiciousScore"] == 100.0

    def test_empty_userkeys_rejected(self, build_client):
        client, _ = build_client()
        response = client.post("/api/r4r-network-analysis", json={"userkeys": []})
        assert response.status_code == 422

    def test_too_many_userkeys_rejected(self, build_client):
        client, _ = build_client()
        userkeys = [f"profileId:{i}" for i in range(21)]
        response = client.post("/api/r4r-network-analysis", json={"userkeys": userkeys})
        assert response.status_code == 422

    def test_blank_userkeys_are_400(self, build_client):
        client, _ = build_client()
        response = client.post("/api/r4r-network-analysis", json={"userkeys": [""]})
        assert response.status_code == 400

    def test_network_upstream_failure(self, build_client):
        client, _ = build_client(failing={"profileId:a"})
        response = client.post("/api/r4r-network-analysis", json={"userkeys": ["profileId:a"]})
        assert response.status_code == 503
