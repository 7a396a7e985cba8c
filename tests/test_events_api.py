import pytest

from competeedu.models.enums import UserRole
from conftest import auth_headers, days_ago

pytestmark = pytest.mark.anyio


async def test_create_and_list_events(client, admin):
    response = await client.post(
        "/events",
        json={"title": "Math Olympiad", "start_date": days_ago(3), "end_date": days_ago(1)},
        headers=auth_headers(admin)
    )
    assert response.status_code == 201
    assert response.json()["results_status"] == "not_started"

    events = await client.get("/events")
    assert [event["title"] for event in events.json()] == ["Math Olympiad"]


async def test_end_before_start_is_rejected(client, admin):
    response = await client.post(
        "/events",
        json={"title": "Backwards", "start_date": days_ago(1), "end_date": days_ago(3)},
        headers=auth_headers(admin)
    )
    assert response.status_code == 400


async def test_status_walk(create_event, set_status):
    event = await create_event()

    assert (await set_status(event["id"], "scoring_locked")).status_code == 400

    response = await set_status(event["id"], "scoring_open")
    assert response.status_code == 200
    assert response.json()["previous_status"] == "not_started"
    assert response.json()["event"]["results_status"] == "scoring_open"

    assert (await set_status(event["id"], "not_started")).status_code == 400
    assert (await set_status(event["id"], "not_started", override=True)).status_code == 200

    await set_status(event["id"], "scoring_open")
    await set_status(event["id"], "scoring_locked")
    assert (await set_status(event["id"], "review")).status_code == 400


async def test_rubric_upsert(client, admin, create_event):
    event = await create_event()
    creativity, technique = event["criteria"]

    rubric = {"criteria": [
        {"id": creativity["id"], "label": "Originality", "weight": 50},
        {"label": "Presentation", "weight": 30, "display_order": 2},
    ]}
    response = await client.put(f"/events/{event['id']}/criteria", json=rubric, headers=auth_headers(admin))

    assert response.status_code == 200
    body = response.json()
    assert [criterion["label"] for criterion in body["criteria"]] == ["Originality", "Presentation"]
    assert body["criteria"][0]["id"] == creativity["id"]
    assert technique["id"] not in {criterion["id"] for criterion in body["criteria"]}
    assert body["total_weight"] == 80
    assert body["weights_sum_to_100"] is False


async def test_rubric_rejects_foreign_criterion(client, admin, create_event):
    event = await create_event()
    other = await create_event(title="Other")

    rubric = {"criteria": [{"id": other["criteria"][0]["id"], "label": "Stolen", "weight": 100}]}
    response = await client.put(f"/events/{event['id']}/criteria", json=rubric, headers=auth_headers(admin))

    assert response.status_code == 400


async def test_rubric_frozen_after_lock(client, admin, create_event, set_status):
    event = await create_event()
    await set_status(event["id"], "scoring_open")
    await set_status(event["id"], "scoring_locked")

    rubric = {"criteria": [{"label": "Late change", "weight": 100}]}
    response = await client.put(f"/events/{event['id']}/criteria", json=rubric, headers=auth_headers(admin))

    assert response.status_code == 403
    assert "Rubric is locked" in response.json()["detail"]

    current = await client.get(f"/events/{event['id']}/criteria", headers=auth_headers(admin))
    assert len(current.json()["criteria"]) == 2


async def test_judge_assignment(client, admin, create_event, judge, student):
    event = await create_event()
    url = f"/events/{event['id']}/judges/{judge.id}"

    assert (await client.post(url, headers=auth_headers(admin))).status_code == 200
    assert (await client.post(url, headers=auth_headers(admin))).status_code == 200

    judges = await client.get(f"/events/{event['id']}/judges", headers=auth_headers(admin))
    assert [entry["judge_id"] for entry in judges.json()] == [str(judge.id)]

    not_a_judge = await client.post(f"/events/{event['id']}/judges/{student.id}", headers=auth_headers(admin))
    assert not_a_judge.status_code == 404

    assert (await client.delete(url, headers=auth_headers(admin))).status_code == 204
    assert (await client.delete(url, headers=auth_headers(admin))).status_code == 404


async def test_event_submissions_for_assigned_judges(client, create_event, create_submission, make_user, judge, student):
    event = await create_event(judges=[judge])
    await create_submission(student, event["id"])
    outsider = await make_user(UserRole.JUDGE)

    response = await client.get(f"/events/{event['id']}/submissions", headers=auth_headers(judge))
    assert response.status_code == 200
    assert len(response.json()) == 1

    response = await client.get(f"/events/{event['id']}/submissions", headers=auth_headers(outsider))
    assert response.status_code == 403


async def test_submissions_close_with_scoring(client, create_event, set_status, student):
    event = await create_event()
    await set_status(event["id"], "scoring_open")
    await set_status(event["id"], "scoring_locked")

    response = await client.post(
        "/submissions",
        json={"event_id": event["id"], "title": "Too late", "media_type": "image"},
        headers=auth_headers(student)
    )
    assert response.status_code == 403


async def test_scoring_alerts(client, admin, create_event, set_status):
    stale = await create_event(title="Stale", scoring_deadline=days_ago(10))
    await create_event(title="Recent", scoring_deadline=days_ago(2))
    await create_event(title="Upcoming", scoring_deadline=days_ago(-5))
    locked = await create_event(title="Locked", scoring_deadline=days_ago(30))
    await set_status(locked["id"], "scoring_open")
    await set_status(locked["id"], "scoring_locked")
    await set_status(stale["id"], "scoring_open")

    response = await client.get("/events/scoring-alerts", headers=auth_headers(admin))

    assert response.status_code == 200
    alerts = [(alert["title"], alert["days_overdue"], alert["urgent"]) for alert in response.json()]
    assert alerts == [("Stale", 10, True), ("Recent", 2, False)]


async def test_update_event_moves_scoring_deadline(client, admin, create_event):
    event = await create_event(title="Late Fair", scoring_deadline=days_ago(-5), public_vote_weight=10)
    headers = auth_headers(admin)
    assert (await client.get("/events/scoring-alerts", headers=headers)).json() == []

    response = await client.put(
        f"/events/{event['id']}",
        json={"scoring_deadline": days_ago(9), "public_vote_weight": 30},
        headers=headers
    )

    assert response.status_code == 200, response.text
    assert response.json()["title"] == "Late Fair"
    assert response.json()["public_vote_weight"] == 30

    alerts = (await client.get("/events/scoring-alerts", headers=headers)).json()
    assert [(alert["title"], alert["days_overdue"], alert["urgent"]) for alert in alerts] == [("Late Fair", 9, True)]


async def test_update_event_validation(client, admin, judge, create_event):
    event = await create_event(start_date=days_ago(5), end_date=days_ago(3))
    url = f"/events/{event['id']}"

    response = await client.put(url, json={"end_date": days_ago(6)}, headers=auth_headers(admin))
    assert response.status_code == 400

    response = await client.put(url, json={"title": None}, headers=auth_headers(admin))
    assert response.status_code == 400

    response = await client.put(url, json={"title": "Renamed"}, headers=auth_headers(judge))
    assert response.status_code == 403

    assert (await client.get(url)).json()["title"] == "Regional Science Fair"
