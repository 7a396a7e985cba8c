from uuid import UUID

import pytest
from fastapi import HTTPException
from sqlalchemy import func, select

from competeedu.models import SubmissionScore
from competeedu.models.enums import UserRole
from competeedu.utils.evaluation_utils import submit_score
from competeedu.utils.results_utils import compute_submission_score
from conftest import auth_headers

pytestmark = pytest.mark.anyio


@pytest.fixture
async def scoring_event(create_event, set_status, create_submission, judge, student):
    event = await create_event(judges=[judge])
    submission = await create_submission(student, event["id"])
    response = await set_status(event["id"], "scoring_open")
    assert response.status_code == 200
    creativity, technique = (criterion["id"] for criterion in event["criteria"])
    return event, submission, creativity, technique


async def count_scores(db) -> int:
    return (await db.execute(select(func.count(SubmissionScore.id)))).scalar_one()


async def test_rescoring_overwrites(client, db, scoring_event, judge, post_scores):
    event, submission, creativity, _ = scoring_event

    response = await post_scores(judge, submission["id"], [(creativity, 70)])
    assert response.status_code == 200
    response = await post_scores(judge, submission["id"], [(creativity, 85)])
    assert response.status_code == 200

    scores = response.json()["scores"]
    assert len(scores) == 1
    assert scores[0]["score"] == 85
    assert await count_scores(db) == 1


async def test_last_entry_wins_within_a_batch(scoring_event, judge, post_scores):
    _, submission, creativity, _ = scoring_event

    response = await post_scores(judge, submission["id"], [(creativity, 10), (creativity, 60)])

    assert response.status_code == 200
    assert [score["score"] for score in response.json()["scores"]] == [60]


async def test_scoring_updates_submission_status(client, scoring_event, judge, student, post_scores):
    _, submission, creativity, technique = scoring_event

    response = await post_scores(judge, submission["id"], [(creativity, 80), (technique, 50)])
    assert response.json()["weighted_score"] == 68.0

    response = await client.get("/submissions/mine", headers=auth_headers(student))
    assert response.json()[0]["status"] == "reviewed"


async def test_scoring_locked_writes_nothing(db, scoring_event, set_status, judge, post_scores):
    event, submission, creativity, _ = scoring_event
    await set_status(event["id"], "scoring_locked")

    response = await post_scores(judge, submission["id"], [(creativity, 90)])

    assert response.status_code == 403
    assert "Scoring is locked" in response.json()["detail"]
    assert await count_scores(db) == 0


async def test_scoring_not_open_yet(db, create_event, create_submission, judge, student, post_scores):
    event = await create_event(judges=[judge])
    submission = await create_submission(student, event["id"])

    response = await post_scores(judge, submission["id"], [(event["criteria"][0]["id"], 90)])

    assert response.status_code == 403
    assert await count_scores(db) == 0


async def test_unassigned_judge_is_rejected(scoring_event, make_user, post_scores):
    _, submission, creativity, _ = scoring_event
    outsider = await make_user(UserRole.JUDGE, "Olive Outsider")

    response = await post_scores(outsider, submission["id"], [(creativity, 90)])

    assert response.status_code == 403
    assert response.json()["detail"] == "Judge is not assigned to this event"


async def test_score_out_of_range(scoring_event, judge, post_scores):
    _, submission, creativity, _ = scoring_event

    for value in (-1, 100.5):
        response = await post_scores(judge, submission["id"], [(creativity, value)])
        assert response.status_code == 422


async def test_criterion_of_another_event(db, scoring_event, create_event, judge, post_scores):
    _, submission, _, _ = scoring_event
    other_event = await create_event(title="Art Contest")

    response = await post_scores(judge, submission["id"], [(other_event["criteria"][0]["id"], 50)])

    assert response.status_code == 400
    assert await count_scores(db) == 0


async def test_unknown_submission(judge, post_scores):
    response = await post_scores(judge, "00000000-0000-0000-0000-000000000000", [
        ("00000000-0000-0000-0000-000000000001", 50)
    ])
    assert response.status_code == 404


async def test_score_visibility(client, admin, scoring_event, make_user, judge, post_scores):
    event, submission, creativity, technique = scoring_event
    second_judge = await make_user(UserRole.JUDGE, "Sid Second")
    await client.post(
        f"/events/{event['id']}/judges/{second_judge.id}",
        headers=auth_headers(admin)
    )

    await post_scores(judge, submission["id"], [(creativity, 80), (technique, 50)])
    await post_scores(second_judge, submission["id"], [(creativity, 100), (technique, 100)])

    own = await client.get(f"/evaluations/submissions/{submission['id']}/scores", headers=auth_headers(judge))
    assert own.status_code == 200
    assert {score["judge_id"] for score in own.json()["scores"]} == {str(judge.id)}
    assert own.json()["weighted_score"] == 68.0

    everything = await client.get(f"/evaluations/submissions/{submission['id']}/scores", headers=auth_headers(admin))
    assert len(everything.json()["scores"]) == 4
    assert everything.json()["weighted_score"] == 84.0

    mine = await client.get("/evaluations/my-scores", headers=auth_headers(second_judge))
    assert len(mine.json()) == 2


async def test_judge_progress(client, admin, scoring_event, judge, post_scores):
    event, submission, creativity, technique = scoring_event
    await post_scores(judge, submission["id"], [(creativity, 80)])
    await post_scores(judge, submission["id"], [(technique, 60)])

    response = await client.get(f"/events/{event['id']}/judges", headers=auth_headers(admin))

    assert response.status_code == 200
    progress = response.json()
    assert len(progress) == 1
    assert progress[0]["scored_count"] == 1
    assert progress[0]["total_submissions"] == 1


async def test_service_layer_single_score(db, scoring_event, judge):
    _, submission, creativity, technique = scoring_event

    row = await submit_score(db, UUID(submission["id"]), UUID(creativity), judge, 40, feedback="Needs polish")
    assert row.score == 40
    assert row.feedback == "Needs polish"

    await submit_score(db, UUID(submission["id"]), UUID(technique), judge, 90)
    assert await compute_submission_score(db, UUID(submission["id"])) == 60.0


async def test_service_layer_rejects_out_of_range(db, scoring_event, judge):
    _, submission, creativity, _ = scoring_event

    with pytest.raises(HTTPException) as error:
        await submit_score(db, UUID(submission["id"]), UUID(creativity), judge, 101)

    assert error.value.status_code == 400
    assert await count_scores(db) == 0
    assert await compute_submission_score(db, UUID(submission["id"])) is None


async def test_removing_scored_criterion_resets_status(client, db, admin, scoring_event, judge, student, post_scores):
    event, submission, creativity, technique = scoring_event
    await post_scores(judge, submission["id"], [(creativity, 80)])

    rubric = {"criteria": [{"id": technique, "label": "Technique", "weight": 100}]}
    response = await client.put(f"/events/{event['id']}/criteria", json=rubric, headers=auth_headers(admin))
    assert response.status_code == 200

    assert await count_scores(db) == 0
    response = await client.get("/submissions/mine", headers=auth_headers(student))
    assert response.json()[0]["status"] == "pending"


async def test_removing_one_criterion_keeps_reviewed(client, admin, scoring_event, judge, student, post_scores):
    event, submission, creativity, technique = scoring_event
    await post_scores(judge, submission["id"], [(creativity, 80), (technique, 50)])

    rubric = {"criteria": [{"id": technique, "label": "Technique", "weight": 100}]}
    await client.put(f"/events/{event['id']}/criteria", json=rubric, headers=auth_headers(admin))

    response = await client.get("/submissions/mine", headers=auth_headers(student))
    assert response.json()[0]["status"] == "reviewed"
