"""
Tests for the candidate pipeline endpoints of the backend simulator.
"""

import pytest

from core.models import VALID_STAGES


def _first_candidate(client):
    return client.get("/api/candidates").json()["data"][0]


def _other_stage(stage: str) -> str:
    return next(candidate for candidate in VALID_STAGES if candidate != stage)


class TestListCandidates:
    def test_envelope(self, client):
        body = client.get("/api/candidates", params={"pageSize": 1000}).json()

        assert len(body["data"]) == 12
        assert body["pagination"]["total"] == 12
        assert body["pagination"]["pageSize"] == 1000

    def test_stage_filter(self, client):
        stage = _first_candidate(client)["stage"]

        data = client.get("/api/candidates", params={"stage": stage}).json()["data"]

        assert data
        assert {candidate["stage"] for candidate in data} == {stage}

    def test_job_filter(self, client):
        job_id = _first_candidate(client)["jobId"]

        data = client.get("/api/candidates", params={"jobId": job_id}).json()["data"]

        assert {candidate["jobId"] for candidate in data} == {job_id}

    def test_search_by_email(self, client):
        email = _first_candidate(client)["email"]

        data = client.get("/api/candidates", params={"search": email.upper()}).json()["data"]

        assert [candidate["email"] for candidate in data] == [email]


class TestCandidateWrites:
    def test_create_defaults_to_applied(self, client):
        response = client.post(
            "/api/candidates", json={"name": " Ada Lovelace ", "email": "ada@example.com", "jobId": "job-1"}
        )

        assert response.status_code == 201
        candidate = response.json()
        assert candidate["id"].startswith("candidate-")
        assert candidate["name"] == "Ada Lovelace"
        assert candidate["stage"] == "applied"
        assert candidate["jobId"] == "job-1"

    def test_create_requires_name_and_email(self, client):
        assert client.post("/api/candidates", json={"name": "Ada"}).status_code == 422

    def test_create_with_invalid_stage(self, client):
        response = client.post(
            "/api/candidates", json={"name": "Ada", "email": "ada@example.com", "stage": "vip"}
        )
        assert response.status_code == 400

    def test_stage_change_adds_timeline_entry(self, client):
        candidate = _first_candidate(client)
        new_stage = _other_stage(candidate["stage"])

        response = client.patch(f"/api/candidates/{candidate['id']}", json={"stage": new_stage})

        assert response.status_code == 200
        assert response.json()["stage"] == new_stage
        timeline = client.get(f"/api/candidates/{candidate['id']}/timeline").json()
        assert len(timeline) == 1
        assert timeline[0]["stage"] == new_stage
        assert timeline[0]["notes"] == f"Stage changed from {candidate['stage']} to {new_stage}"

    def test_same_stage_adds_no_timeline_entry(self, client):
        candidate = _first_candidate(client)

        client.patch(f"/api/candidates/{candidate['id']}", json={"stage": candidate["stage"]})

        assert client.get(f"/api/candidates/{candidate['id']}/timeline").json() == []

    def test_invalid_stage_rejected(self, client):
        candidate = _first_candidate(client)

        response = client.patch(f"/api/candidates/{candidate['id']}", json={"stage": "promoted"})

        assert response.status_code == 400
        assert response.json()["error"]["message"].startswith("Invalid stage. Must be one of:")
        assert _first_candidate(client)["stage"] == candidate["stage"]

    def test_update_missing_candidate(self, client):
        response = client.patch("/api/candidates/nobody", json={"stage": "offer"})

        assert response.status_code == 404
        assert response.json()["error"]["message"] == "Candidate not found"

    def test_injected_failure_leaves_stage(self, client, simulator_app):
        candidate = _first_candidate(client)
        simulator_app.state.faults.fail_next("candidates.update")

        response = client.patch(
            f"/api/candidates/{candidate['id']}", json={"stage": _other_stage(candidate["stage"])}
        )

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "SIMULATED_FAILURE"
        assert _first_candidate(client)["stage"] == candidate["stage"]

    def test_delete_removes_candidate_and_history(self, client):
        candidate = _first_candidate(client)
        client.post(f"/api/candidates/{candidate['id']}/notes", json={"content": "Call back"})

        response = client.delete(f"/api/candidates/{candidate['id']}")

        assert response.status_code == 204
        assert client.get(f"/api/candidates/{candidate['id']}").status_code == 404
        assert client.get(f"/api/candidates/{candidate['id']}/notes").json() == []

    def test_delete_missing_candidate(self, client):
        assert client.delete("/api/candidates/nobody").status_code == 404


class TestNotes:
    def test_add_and_list_notes(self, client):
        candidate_id = _first_candidate(client)["id"]

        first = client.post(
            f"/api/candidates/{candidate_id}/notes",
            json={"content": "  Strong system design ", "author": "Priya"},
        )
        client.post(f"/api/candidates/{candidate_id}/notes", json={"content": "Needs follow-up"})

        assert first.status_code == 201
        assert first.json()["content"] == "Strong system design"
        assert first.json()["candidateId"] == candidate_id

        notes = client.get(f"/api/candidates/{candidate_id}/notes").json()
        assert [note["content"] for note in notes] == ["Strong system design", "Needs follow-up"]
        assert [note["author"] for note in notes] == ["Priya", "Unknown"]

    def test_empty_note_rejected(self, client):
        candidate_id = _first_candidate(client)["id"]

        response = client.post(f"/api/candidates/{candidate_id}/notes", json={"content": "  "})

        assert response.status_code == 422

    def test_note_for_missing_candidate(self, client):
        response = client.post("/api/candidates/nobody/notes", json={"content": "hello"})
        assert response.status_code == 404

    @pytest.mark.parametrize("path", ["/notes", "/timeline"])
    def test_empty_history_is_a_list(self, client, path):
        candidate_id = _first_candidate(client)["id"]
        assert client.get(f"/api/candidates/{candidate_id}{path}").json() == []
