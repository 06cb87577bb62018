"""Tests for job routes."""

import uuid


def schedule(client, **overrides):
    body = {
        "owner_id": 5,
        "suggested_file_name": "pong.txt",
        "job_type": "Sample.PingPong",
        "arguments": "hello",
    }
    body.update(overrides)
    return client.post("/jobs", json=body)


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_schedule_and_get(client):
    """Test scheduling over HTTP and reading the job back."""
    response = schedule(client)

    assert response.status_code == 200
    created = response.json()
    assert created["status"] == "pending"
    assert created["composite"] is False

    fetched = client.get(f"/jobs/{created['job_id']}").json()
    assert fetched["job_id"] == created["job_id"]
    assert fetched["arguments"] == "hello"


def test_schedule_composite(client):
    """Test a composite job is returned with its children on lookup."""
    children = [
        {"owner_id": 5, "suggested_file_name": "a.txt", "job_type": "Sample.PingPong", "arguments": "a"},
        {"owner_id": 5, "suggested_file_name": "b.txt", "job_type": "Sample.PingPong", "arguments": "b"},
    ]
    created = schedule(client, suggested_file_name="all.zip", job_type="Compose.Archive", children=children).json()

    assert created["status"] == "composite"

    fetched = client.get(f"/jobs/{created['job_id']}", params={"owner_id": 5}).json()
    assert [c["arguments"] for c in fetched["children"]] == ["a", "b"]


def test_schedule_nested_rejected(client):
    """Test that grandchildren are a client error."""
    grandchild = {"owner_id": 5, "suggested_file_name": "c.txt", "job_type": "X"}
    nested = {"owner_id": 5, "suggested_file_name": "b.zip", "job_type": "X", "children": [grandchild]}

    response = schedule(client, children=[nested])

    assert response.status_code == 400
    assert client.get("/jobs", params={"owner_id": 5}).json()["total"] == 0


def test_list_jobs(client):
    """Test paging parameters."""
    for i in range(3):
        schedule(client, suggested_file_name=f"{i}.txt")

    page = client.get("/jobs", params={"owner_id": 5, "count": 2}).json()

    assert page["total"] == 3
    assert page["count"] == 2
    assert len(page["items"]) == 2
    assert client.get("/jobs", params={"page": 0}).status_code == 400


def test_missing_job_is_404(client):
    job_id = uuid.uuid4()

    assert client.get(f"/jobs/{job_id}").status_code == 404
    assert client.get(f"/jobs/{job_id}/logs").status_code == 404
    assert client.get(f"/jobs/{job_id}/download").status_code == 404


def test_logs_and_download(client, file_provider):
    """Test serving stored log and output files."""
    job_id = schedule(client).json()["job_id"]

    assert client.get(f"/jobs/{job_id}/download").status_code == 404

    file_provider.save_log(job_id, "captured log")
    file_provider.save_output(job_id, "payload")

    logs = client.get(f"/jobs/{job_id}/logs")
    assert logs.status_code == 200
    assert logs.text == "captured log"

    download = client.get(f"/jobs/{job_id}/download")
    assert download.status_code == 200
    assert download.content == b"payload"
    assert "pong.txt" in download.headers["content-disposition"]
