import pytest

from conftest import auth_headers

pytestmark = pytest.mark.anyio


async def test_login_and_me(client, judge):
    response = await client.post("/auth/login", json={"email": judge.email, "password": "password123"})
    assert response.status_code == 200
    token = response.json()["access_token"]

    me = await client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == judge.email
    assert [role["name"] for role in me.json()["roles"]] == ["judge"]


async def test_login_with_wrong_password(client, judge):
    response = await client.post("/auth/login", json={"email": judge.email, "password": "not-the-password"})
    assert response.status_code == 401


async def test_invalid_token(client):
    response = await client.get("/auth/me", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401


async def test_admin_creates_accounts(client, admin):
    school = await client.post("/schools", json={"name": "Lincoln Middle"}, headers=auth_headers(admin))
    assert school.status_code == 201
    duplicate = await client.post("/schools", json={"name": "Lincoln Middle"}, headers=auth_headers(admin))
    assert duplicate.status_code == 409

    student = await client.post(
        "/users/students",
        json={
            "email": "lin@school.edu",
            "full_name": "Lin Student",
            "password": "password123",
            "school_id": school.json()["id"]
        },
        headers=auth_headers(admin)
    )
    assert student.status_code == 201
    assert student.json()["school_id"] == school.json()["id"]

    payload = {"email": "jo@competeedu.org", "full_name": "Jo Judge", "password": "password123", "expertise": "Robotics"}
    judge = await client.post("/users/judges", json=payload, headers=auth_headers(admin))
    assert judge.status_code == 201
    assert [role["name"] for role in judge.json()["roles"]] == ["judge"]

    again = await client.post("/users/judges", json=payload, headers=auth_headers(admin))
    assert again.status_code == 409

    judges = await client.get("/users/judges", headers=auth_headers(admin))
    assert [entry["email"] for entry in judges.json()] == ["jo@competeedu.org"]


async def test_site_settings(client, admin):
    response = await client.get("/cms/settings")
    assert response.status_code == 200
    assert response.json()["settings"]["site_name"] == "CompeteEdu"

    response = await client.put(
        "/cms/settings",
        json={"settings": {"site_name": "Springfield Fair", "footer_note": "Good luck"}},
        headers=auth_headers(admin)
    )
    assert response.status_code == 200
    assert response.json()["settings"]["site_name"] == "Springfield Fair"
    assert response.json()["settings"]["footer_note"] == "Good luck"

    assert (await client.get("/cms/settings")).json()["settings"]["site_name"] == "Springfield Fair"


async def test_update_judge_profile(client, admin, judge, student):
    url = f"/users/judges/{judge.id}"

    response = await client.put(url, json={"expertise": "Astronomy", "bio": "Former teacher"}, headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.json()["full_name"] == "Jane Judge"
    assert response.json()["expertise"] == "Astronomy"
    assert response.json()["bio"] == "Former teacher"

    response = await client.put(url, json={"full_name": "Jane Q. Judge"}, headers=auth_headers(admin))
    assert response.json()["full_name"] == "Jane Q. Judge"
    assert response.json()["expertise"] == "Astronomy"

    not_a_judge = await client.put(f"/users/judges/{student.id}", json={"bio": "x"}, headers=auth_headers(admin))
    assert not_a_judge.status_code == 404

    forbidden = await client.put(url, json={"bio": "Self edit"}, headers=auth_headers(judge))
    assert forbidden.status_code == 403


async def test_delete_judge_removes_assignments(client, admin, judge, create_event):
    event = await create_event(judges=[judge])

    response = await client.delete(f"/users/judges/{judge.id}", headers=auth_headers(admin))
    assert response.status_code == 204

    assert (await client.get("/users/judges", headers=auth_headers(admin))).json() == []
    assert (await client.get(f"/events/{event['id']}/judges", headers=auth_headers(admin))).json() == []
    assert (await client.delete(f"/users/judges/{judge.id}", headers=auth_headers(admin))).status_code == 404


async def test_delete_judge_with_scores_is_refused(
        client, admin, judge, student, create_event, create_submission, set_status, post_scores
):
    event = await create_event(judges=[judge])
    submission = await create_submission(student, event["id"])
    await set_status(event["id"], "scoring_open")
    await post_scores(judge, submission["id"], [(event["criteria"][0]["id"], 70)])

    response = await client.delete(f"/users/judges/{judge.id}", headers=auth_headers(admin))

    assert response.status_code == 409
    judges = (await client.get("/users/judges", headers=auth_headers(admin))).json()
    assert [entry["email"] for entry in judges] == [judge.email]
