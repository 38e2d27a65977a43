# tests/v1/test_comments_reports.py
"""Tests for comment and report endpoints."""

from fastapi import status
from fastapi.testclient import TestClient

from confession_board.models import ConfessionReport


def test_add_and_list_comments(client: TestClient, confession) -> None:
    url = f"/api/v1/confessions/{confession.id}/comments"

    created = client.post(url, json={"content": "  Same here.  "})
    named = client.post(url, json={"author_name": "Pat", "content": "Hang in there"})
    listed = client.get(url)

    assert created.status_code == status.HTTP_201_CREATED
    assert created.json()["author_name"] == "Anonymous"
    assert created.json()["content"] == "Same here."
    assert named.json()["author_name"] == "Pat"
    assert listed.status_code == status.HTTP_200_OK
    assert {c["id"] for c in listed.json()} == {created.json()["id"], named.json()["id"]}


def test_comment_count_appears_in_feed(client: TestClient, confession) -> None:
    client.post(f"/api/v1/confessions/{confession.id}/comments", json={"content": "one"})

    feed = client.get("/api/v1/confessions/").json()

    assert feed["items"][0]["comment_count"] == 1


def test_blank_comment_rejected(client: TestClient, confession) -> None:
    response = client.post(
        f"/api/v1/confessions/{confession.id}/comments",
        json={"content": "   "},
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_comments_on_missing_confession(client: TestClient) -> None:
    listed = client.get("/api/v1/confessions/missing/comments")
    created = client.post("/api/v1/confessions/missing/comments", json={"content": "hi"})

    assert listed.status_code == status.HTTP_404_NOT_FOUND
    assert created.status_code == status.HTTP_404_NOT_FOUND


def test_report_records_reporter_identity(client: TestClient, confession, db_session) -> None:
    response = client.post(
        f"/api/v1/confessions/{confession.id}/reports",
        json={"reason": "Targets a real person"},
        headers={"X-Vote-Identifier": "anon_ab12", "User-Agent": "Mozilla/5.0 (Windows NT 10.0)"},
    )

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["confession_id"] == confession.id
    report = db_session.get(ConfessionReport, response.json()["id"])
    assert report.reporter_identifier == "anon_ab12"
    assert report.reason == "Targets a real person"
    assert report.device_info == "Unknown Browser on Windows"


def test_report_requires_reason(client: TestClient, confession) -> None:
    response = client.post(
        f"/api/v1/confessions/{confession.id}/reports",
        json={"reason": "  "},
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_report_missing_confession(client: TestClient) -> None:
    response = client.post("/api/v1/confessions/missing/reports", json={"reason": "spam"})

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"] == "Confession not found"
