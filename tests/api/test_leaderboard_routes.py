import pytest


@pytest.mark.asyncio
async def test_leaderboard_shape(api_client, user_repo):
    user_repo.seed("Ann", "ann@x.com", score=10, d1990=2)
    user_repo.seed("Bob", "bob@x.com", score=40)

    resp = await api_client.get("/leaderboard")

    assert resp.status_code == 200
    data = resp.json()
    assert set(data) == {"overall", "byDecade"}
    assert [u["name"] for u in data["overall"]] == ["Bob", "Ann"]
    assert [u["name"] for u in data["byDecade"]["1990s"]] == ["Ann"]
    assert data["byDecade"]["2020s"] == []


@pytest.mark.asyncio
async def test_leaderboard_degrades_when_one_decade_fails(api_client, user_repo):
    user_repo.seed("Ann", "ann@x.com", score=10, d1960=1)
    user_repo.fail_when = lambda spec: any(cond.column == "d1960" for cond in spec.where)

    resp = await api_client.get("/leaderboard")

    assert resp.status_code == 200
    assert "1960s" not in resp.json()["byDecade"]
    assert len(resp.json()["byDecade"]) == 7


@pytest.mark.asyncio
async def test_leaderboard_overall_failure_is_500(api_client, user_repo):
    user_repo.fail_when = lambda spec: not spec.where

    resp = await api_client.get("/leaderboard")

    assert resp.status_code == 500
