"""
Tests for activity endpoints.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.unit
class TestDonationEndpoint:
    """Tests for POST /activity/donations."""

    async def test_donation(self, alumni_client: AsyncClient) -> None:
        response = await alumni_client.post(
            "/api/v1/activity/donations",
            json={"amount": 250, "donation_id": "don-1", "cause": "Library"},
        )

        assert response.status_code == 201
        data = response.json()
        # 2 points for the donation, 50 for the first-donation achievement
        assert data["points_earned"] == 52
        assert data["new_achievements"] == ["generous_heart"]
        assert data["total_points"] == 67

    async def test_donation_requires_positive_amount(self, alumni_client: AsyncClient) -> None:
        response = await alumni_client.post("/api/v1/activity/donations", json={"amount": 0})

        assert response.status_code == 422

    async def test_donation_rejects_infinite_amount(self, alumni_client: AsyncClient) -> None:
        """Test an amount that overflows to infinity fails validation."""
        response = await alumni_client.post(
            "/api/v1/activity/donations",
            content=b'{"amount": 1e400}',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 422

    async def test_donation_requires_session(self, client: AsyncClient) -> None:
        response = await client.post("/api/v1/activity/donations", json={"amount": 100})

        assert response.status_code == 401


@pytest.mark.unit
class TestEventRsvpEndpoint:
    """Tests for POST /activity/event-rsvps."""

    async def test_rsvp(self, alumni_client: AsyncClient) -> None:
        response = await alumni_client.post(
            "/api/v1/activity/event-rsvps",
            json={"event_id": "evt-1", "event_title": "Homecoming"},
        )

        assert response.status_code == 201
        assert response.json()["points_earned"] == 55
        assert response.json()["new_achievements"] == ["event_explorer"]

    async def test_rsvp_advances_joined_challenge(self, alumni_client: AsyncClient) -> None:
        """Test an RSVP completes the joined one-RSVP challenge."""
        await alumni_client.post("/api/v1/gamification/challenges/special_reunion/join")

        response = await alumni_client.post("/api/v1/activity/event-rsvps", json={"event_id": "evt-1"})

        assert response.json()["completed_challenges"] == ["special_reunion"]

    async def test_admin_forbidden(self, client: AsyncClient) -> None:
        await client.post("/api/v1/session/login", json={"user_id": "admin-1"})

        response = await client.post("/api/v1/activity/event-rsvps", json={"event_id": "evt-1"})

        assert response.status_code == 403


@pytest.mark.unit
class TestMentorshipRequestEndpoint:
    """Tests for POST /activity/mentorship-requests."""

    async def test_mentorship_request(self, alumni_client: AsyncClient) -> None:
        response = await alumni_client.post(
            "/api/v1/activity/mentorship-requests",
            json={"mentor_id": "alum-2", "mentor_name": "Ben Graduate"},
        )

        assert response.status_code == 201
        assert response.json()["points_earned"] == 50
        assert response.json()["new_achievements"] == ["first_mentorship"]

    async def test_self_request_rejected(self, alumni_client: AsyncClient) -> None:
        response = await alumni_client.post(
            "/api/v1/activity/mentorship-requests", json={"mentor_id": "alum-1"}
        )

        assert response.status_code == 400
