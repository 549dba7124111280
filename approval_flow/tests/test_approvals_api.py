def _create(client, headers, flow, title="Conference travel"):
    resp = client.post(
        "/approvals",
        headers=headers,
        json={"title": title, "form_data": {"amount": 1200}, "flow_process": flow},
    )
    assert resp.status_code == 200, resp.text
    return resp.json()


def test_requires_bearer_token(client, two_step_flow):
    r = client.post(
        "/approvals",
        json={"title": "x", "form_data": {}, "flow_process": two_step_flow},
    )
    assert r.status_code == 401

    r = client.get("/approvals", headers={"Authorization": "Bearer not-a-real-token"})
    assert r.status_code == 401

    r = client.get("/approvals", headers={"Authorization": "Basic abc"})
    assert r.status_code == 401


def test_create_uses_authenticated_requester(client, auth_headers, two_step_flow):
    created = _create(client, auth_headers("carol"), two_step_flow)

    assert created["requester_id"] == "carol"
    assert created["status"] == "pending"
    assert created["form_data"] == {"amount": 1200}
    assert created["flow_process"]["current_step"] == 1
    assert [s["approver_id"] for s in created["flow_process"]["steps"]] == ["alice", "bob"]
    assert all(s["status"] == "pending" for s in created["flow_process"]["steps"])

    fetched = client.get(f"/approvals/{created['id']}", headers=auth_headers("carol"))
    assert fetched.status_code == 200
    assert fetched.json()["id"] == created["id"]


def test_create_rejects_malformed_flow(client, auth_headers):
    headers = auth_headers("carol")

    r = client.post(
        "/approvals",
        headers=headers,
        json={"title": "x", "flow_process": {"current_step": 1, "steps": []}},
    )
    assert r.status_code == 400

    r = client.post(
        "/approvals",
        headers=headers,
        json={
            "title": "x",
            "flow_process": {
                "current_step": 1,
                "steps": [
                    {"seq": 1, "name": "A", "approver_id": "alice"},
                    {"seq": 3, "name": "B", "approver_id": "bob"},
                ],
            },
        },
    )
    assert r.status_code == 400

    r = client.post("/approvals", headers=headers, json={"title": "x"})
    assert r.status_code == 422


def test_two_step_approval_end_to_end(client, auth_headers, two_step_flow):
    created = _create(client, auth_headers("carol"), two_step_flow)
    request_id = created["id"]

    r = client.post(f"/approvals/{request_id}/approve", headers=auth_headers("alice"))
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["outcome"] == "advanced"
    assert body["status"] == "pending"
    assert body["flow_process"]["current_step"] == 2
    assert body["flow_process"]["steps"][0]["status"] == "approved"

    r = client.post(f"/approvals/{request_id}/approve", headers=auth_headers("bob"))
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["outcome"] == "completed"
    assert body["status"] == "approved"
    assert body["flow_process"]["current_step"] == 2

    logs = client.get(f"/approvals/{request_id}/logs", headers=auth_headers("carol")).json()
    assert [(log["action_type"], log["actor_id"]) for log in logs] == [
        ("CREATED", "carol"),
        ("APPROVED", "alice"),
        ("APPROVED", "bob"),
    ]


def test_reject_end_to_end(client, auth_headers, two_step_flow):
    created = _create(client, auth_headers("carol"), two_step_flow)
    request_id = created["id"]

    r = client.post(
        f"/approvals/{request_id}/reject",
        headers=auth_headers("alice"),
        json={"reason": "Budget frozen"},
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["outcome"] == "rejected"
    assert body["status"] == "rejected"
    assert body["flow_process"]["current_step"] == 1
    assert body["flow_process"]["steps"][1]["status"] == "pending"
    assert body["flow_process"]["steps"][1]["timestamp"] is None

    logs = client.get(f"/approvals/{request_id}/logs", headers=auth_headers("carol")).json()
    assert logs[-1]["action_type"] == "REJECTED"
    assert logs[-1]["content"] == "Budget frozen"

    r = client.post(f"/approvals/{request_id}/approve", headers=auth_headers("alice"))
    assert r.status_code == 400


def test_reject_requires_reason(client, auth_headers, two_step_flow):
    created = _create(client, auth_headers("carol"), two_step_flow)

    r = client.post(
        f"/approvals/{created['id']}/reject",
        headers=auth_headers("alice"),
        json={},
    )
    assert r.status_code == 422


def test_not_current_approver_is_forbidden(client, auth_headers, two_step_flow):
    created = _create(client, auth_headers("carol"), two_step_flow)
    request_id = created["id"]

    r = client.post(f"/approvals/{request_id}/approve", headers=auth_headers("bob"))
    assert r.status_code == 403
    assert "not the current approver" in r.json()["detail"]

    r = client.post(f"/approvals/{request_id}/approve", headers=auth_headers("carol"))
    assert r.status_code == 403

    after = client.get(f"/approvals/{request_id}", headers=auth_headers("carol")).json()
    assert after["flow_process"] == created["flow_process"]
    assert after["version"] == created["version"]


def test_missing_request_is_404(client, auth_headers):
    headers = auth_headers("alice")

    assert client.get("/approvals/missing", headers=headers).status_code == 404
    assert client.post("/approvals/missing/approve", headers=headers).status_code == 404
    assert client.get("/approvals/missing/logs", headers=headers).status_code == 404
    r = client.post("/approvals/missing/comments", headers=headers, json={"content": "hi"})
    assert r.status_code == 404


def test_comment_is_logged_under_actor(client, auth_headers, two_step_flow):
    created = _create(client, auth_headers("carol"), two_step_flow)
    request_id = created["id"]

    r = client.post(
        f"/approvals/{request_id}/comments",
        headers=auth_headers("dave"),
        json={"content": "Which conference?"},
    )
    assert r.status_code == 200, r.text
    log = r.json()
    assert log["action_type"] == "COMMENT"
    assert log["actor_id"] == "dave"
    assert log["content"] == "Which conference?"

    after = client.get(f"/approvals/{request_id}", headers=auth_headers("carol")).json()
    assert after["flow_process"] == created["flow_process"]


def test_list_scopes(client, auth_headers, two_step_flow):
    created = _create(client, auth_headers("carol"), two_step_flow)

    inbox = client.get("/approvals", params={"scope": "inbox"}, headers=auth_headers("alice"))
    assert inbox.status_code == 200
    assert [r["id"] for r in inbox.json()] == [created["id"]]

    inbox_bob = client.get("/approvals", params={"scope": "inbox"}, headers=auth_headers("bob"))
    assert inbox_bob.json() == []

    mine = client.get("/approvals", params={"scope": "mine"}, headers=auth_headers("carol"))
    assert [r["id"] for r in mine.json()] == [created["id"]]

    everyone = client.get("/approvals", headers=auth_headers("zed"))
    assert [r["id"] for r in everyone.json()] == [created["id"]]

    bad = client.get("/approvals", params={"scope": "nope"}, headers=auth_headers("zed"))
    assert bad.status_code == 422
