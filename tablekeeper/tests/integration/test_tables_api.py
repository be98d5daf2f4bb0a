"""End-to-end tests for tables and membership management."""

import pytest

from tablekeeper.tests.fixtures.sample_data import SAMPLE_TABLE_DATA, auth_headers


@pytest.fixture
async def gm(register_user):
    body = await register_user("gamemaster")
    return {"id": body["user"]["id"], "headers": auth_headers(body["token"])}


@pytest.fixture
async def player(register_user):
    body = await register_user("player")
    return {"id": body["user"]["id"], "headers": auth_headers(body["token"])}


@pytest.fixture
async def table(client, gm):
    response = await client.post("/api/tables", json=SAMPLE_TABLE_DATA, headers=gm["headers"])
    assert response.status_code == 201
    return response.json()


async def _join(client, table, gm, player):
    request = await client.post(
        f"/api/tables/{table['id']}/requests", json={}, headers=player["headers"]
    )
    accepted = await client.post(
        f"/api/table-requests/{request.json()['id']}/accept", headers=gm["headers"]
    )
    assert accepted.status_code == 200


class TestCreateAndRead:
    async def test_creator_is_gm(self, table, gm):
        assert table["gm_id"] == gm["id"]
        assert table["status"] == "active"
        assert table["player_slots"] == 2

    async def test_invalid_slots(self, client, gm):
        response = await client.post(
            "/api/tables", json={"title": "Empty", "player_slots": 0}, headers=gm["headers"]
        )

        assert response.status_code == 400

    async def test_requires_authentication(self, client):
        response = await client.post("/api/tables", json=SAMPLE_TABLE_DATA)

        assert response.status_code == 401

    async def test_get_unknown_table(self, client, gm):
        response = await client.get(
            "/api/tables/00000000-0000-7000-8000-000000000000", headers=gm["headers"]
        )

        assert response.status_code == 404
        assert response.json()["error"] == "TABLE_NOT_FOUND"

    async def test_list_filters(self, client, gm, player, table):
        await client.post(
            "/api/tables", json={"title": "Own table", "player_slots": 3}, headers=player["headers"]
        )

        everything = await client.get("/api/tables", headers=gm["headers"])
        by_gm = await client.get(
            "/api/tables", params={"gm_id": gm["id"]}, headers=gm["headers"]
        )
        finished = await client.get(
            "/api/tables", params={"status": "finished"}, headers=gm["headers"]
        )

        assert everything.json()["total"] == 2
        assert [t["id"] for t in by_gm.json()["items"]] == [table["id"]]
        assert finished.json()["total"] == 0

    async def test_list_mine(self, client, gm, player, table):
        before = await client.get("/api/tables", params={"mine": True}, headers=player["headers"])
        await _join(client, table, gm, player)
        after = await client.get("/api/tables", params={"mine": True}, headers=player["headers"])

        assert before.json()["total"] == 0
        assert [t["id"] for t in after.json()["items"]] == [table["id"]]


class TestUpdate:
    async def test_gm_updates_table(self, client, gm, table):
        response = await client.patch(
            f"/api/tables/{table['id']}",
            json={"title": "Curse of Strahd (Revamped)", "description": None},
            headers=gm["headers"],
        )

        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "Curse of Strahd (Revamped)"
        assert body["description"] is None
        assert body["player_slots"] == table["player_slots"]

    async def test_only_gm_updates(self, client, player, table):
        response = await client.patch(
            f"/api/tables/{table['id']}", json={"title": "Hijacked"}, headers=player["headers"]
        )

        assert response.status_code == 403

    async def test_title_cannot_be_null(self, client, gm, table):
        response = await client.patch(
            f"/api/tables/{table['id']}", json={"title": None}, headers=gm["headers"]
        )

        assert response.status_code == 400

    async def test_slots_cannot_drop_below_members(self, client, gm, player, table, register_user):
        await _join(client, table, gm, player)
        other = await register_user("other")
        await _join(
            client,
            table,
            gm,
            {"id": other["user"]["id"], "headers": auth_headers(other["token"])},
        )

        response = await client.patch(
            f"/api/tables/{table['id']}", json={"player_slots": 1}, headers=gm["headers"]
        )

        assert response.status_code == 400
        assert response.json()["details"]["current"] == 2


class TestMembers:
    async def test_members_visible_to_members_only(self, client, gm, player, table, register_user):
        stranger = await register_user("stranger")
        await _join(client, table, gm, player)

        as_gm = await client.get(f"/api/tables/{table['id']}/members", headers=gm["headers"])
        as_player = await client.get(
            f"/api/tables/{table['id']}/members", headers=player["headers"]
        )
        as_stranger = await client.get(
            f"/api/tables/{table['id']}/members", headers=auth_headers(stranger["token"])
        )

        assert as_gm.status_code == as_player.status_code == 200
        assert [m["username"] for m in as_gm.json()] == ["player"]
        assert as_stranger.status_code == 403

    async def test_remove_member(self, client, gm, player, table):
        await _join(client, table, gm, player)

        by_player = await client.delete(
            f"/api/tables/{table['id']}/members/{player['id']}", headers=player["headers"]
        )
        removed = await client.delete(
            f"/api/tables/{table['id']}/members/{player['id']}", headers=gm["headers"]
        )
        again = await client.delete(
            f"/api/tables/{table['id']}/members/{player['id']}", headers=gm["headers"]
        )

        assert by_player.status_code == 403
        assert removed.status_code == 204
        assert again.status_code == 404

    async def test_leave(self, client, gm, player, table):
        await _join(client, table, gm, player)

        left = await client.post(f"/api/tables/{table['id']}/leave", headers=player["headers"])
        again = await client.post(f"/api/tables/{table['id']}/leave", headers=player["headers"])
        gm_leaves = await client.post(f"/api/tables/{table['id']}/leave", headers=gm["headers"])

        assert left.status_code == 204
        assert again.status_code == 403
        assert gm_leaves.status_code == 422
        assert gm_leaves.json()["error"] == "GAME_MASTER_CANNOT_LEAVE"

    async def test_delete_table(self, client, gm, player, table):
        forbidden = await client.delete(f"/api/tables/{table['id']}", headers=player["headers"])
        deleted = await client.delete(f"/api/tables/{table['id']}", headers=gm["headers"])
        gone = await client.get(f"/api/tables/{table['id']}", headers=gm["headers"])

        assert forbidden.status_code == 403
        assert deleted.status_code == 204
        assert gone.status_code == 404
