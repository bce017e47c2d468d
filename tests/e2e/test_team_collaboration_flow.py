"""
End-to-end test for team collaboration flow with multiple users.

Tests complete multi-user team workflows.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.utils import headers_for
from tests.factories import ChallengeFactory, ProfileFactory


@pytest.mark.e2e
@pytest.mark.asyncio
class TestTeamCollaborationFlow:
    """Complete team collaboration flow with applications and invitations."""

    async def test_team_fills_up_through_every_join_path(
        self, client: AsyncClient, db_session: AsyncSession
    ):
        """
        Owner O creates a team with room for O plus three members:
        1. A applies, O approves -> 2/4
        2. B accepts a pending invitation -> 3/4
        3. C applies and is approved -> 4/4
        4. D may still apply, but approving D fails and D stays pending
        5. Everyone sees the team in /me/teams, the roster matches the count
        6. B leaves, D is approved into the freed seat
        7. O deletes the team
        """
        challenge = await ChallengeFactory.create_async(db_session, max_team_size=4)
        for user_id in ("owner", "alice", "bob", "carol", "dave"):
            await ProfileFactory.create_async(db_session, user_id=user_id)
        await db_session.commit()

        owner = headers_for("owner")

        # Team creation
        team_response = await client.post(
            "/api/teams/",
            headers=owner,
            json={"name": "Collaboration Team", "challenge_id": challenge.id, "max_members": 4},
        )
        assert team_response.status_code == 201
        team_id = team_response.json()["id"]
        assert team_response.json()["current_members"] == 1

        # Invitation for B is sent early and stays pending
        invitation = await client.post(
            f"/api/teams/{team_id}/invitations", headers=owner, json={"invited_user_id": "bob"}
        )
        assert invitation.status_code == 201

        # Step 1: A applies, owner approves
        application_a = await client.post(
            f"/api/teams/{team_id}/applications", headers=headers_for("alice"), json={"message": "Hi"}
        )
        assert application_a.json()["status"] == "pending"
        review_a = await client.post(
            f"/api/teams/{team_id}/applications/{application_a.json()['id']}/review",
            headers=owner,
            json={"decision": "accepted"},
        )
        assert review_a.status_code == 200
        assert (await client.get(f"/api/teams/{team_id}", headers=owner)).json()["current_members"] == 2

        # Step 2: B accepts the invitation
        pending = await client.get("/api/me/invitations", headers=headers_for("bob"))
        assert [i["team_id"] for i in pending.json()] == [team_id]
        accepted = await client.post(
            f"/api/invitations/{invitation.json()['id']}/respond",
            headers=headers_for("bob"),
            json={"decision": "accepted"},
        )
        assert accepted.status_code == 200
        assert (await client.get(f"/api/teams/{team_id}", headers=owner)).json()["current_members"] == 3

        # Step 3: C takes the last seat
        application_c = await client.post(
            f"/api/teams/{team_id}/applications", headers=headers_for("carol"), json={}
        )
        review_c = await client.post(
            f"/api/teams/{team_id}/applications/{application_c.json()['id']}/review",
            headers=owner,
            json={"decision": "accepted"},
        )
        assert review_c.status_code == 200
        team = (await client.get(f"/api/teams/{team_id}", headers=owner)).json()
        assert team["current_members"] == team["max_members"] == 4

        # Step 4: D can apply but cannot be approved
        application_d = await client.post(
            f"/api/teams/{team_id}/applications", headers=headers_for("dave"), json={}
        )
        assert application_d.status_code == 201
        review_d = await client.post(
            f"/api/teams/{team_id}/applications/{application_d.json()['id']}/review",
            headers=owner,
            json={"decision": "accepted"},
        )
        assert review_d.status_code == 409
        assert review_d.json()["code"] == "capacity_exceeded"
        still_pending = await client.get(f"/api/teams/{team_id}/applications", headers=owner)
        assert [a["applicant_id"] for a in still_pending.json()] == ["dave"]

        # Step 5: Roster and reverse index agree
        roster = await client.get(f"/api/teams/{team_id}/members", headers=headers_for("alice"))
        assert roster.status_code == 200
        assert sorted(m["user_id"] for m in roster.json()) == ["alice", "bob", "carol", "owner"]
        for user_id in ("owner", "alice", "bob", "carol"):
            mine = await client.get("/api/me/teams", headers=headers_for(user_id))
            assert [t["team_id"] for t in mine.json()] == [team_id]
        assert (await client.get("/api/me/teams", headers=headers_for("dave"))).json() == []

        # Step 6: A seat frees up
        left = await client.post(f"/api/teams/{team_id}/leave", headers=headers_for("bob"))
        assert left.status_code == 204
        review_d_again = await client.post(
            f"/api/teams/{team_id}/applications/{application_d.json()['id']}/review",
            headers=owner,
            json={"decision": "accepted"},
        )
        assert review_d_again.status_code == 200
        assert (await client.get(f"/api/teams/{team_id}", headers=owner)).json()["current_members"] == 4

        # Step 7: Members cannot delete, the owner can
        forbidden = await client.delete(f"/api/teams/{team_id}", headers=headers_for("alice"))
        assert forbidden.status_code == 403
        deleted = await client.delete(f"/api/teams/{team_id}", headers=owner)
        assert deleted.status_code == 204
        assert (await client.get("/api/me/teams", headers=headers_for("alice"))).json() == []
