import pytest
from httpx import AsyncClient

SOURCE_REFS = [{"source_document_id": "eu-reg-2024-01", "excerpt": "Article 12"}]


async def _approve(client: AsyncClient, rule_version_id: str):
    response = await client.post(
        f"/v1/rule-versions/{rule_version_id}/approve", json={"approver": "curator@example.com"}
    )
    assert response.status_code == 200
    assert response.json() == {"rule_version_id": rule_version_id, "status": "approved"}


async def _publish(client: AsyncClient) -> str:
    response = await client.post(
        "/v1/snapshots", json={"project_id": "P", "jurisdiction": "EU", "as_of_date": "2026-03-01"}
    )
    assert response.status_code == 200
    return response.json()["id"]


async def _ask(client: AsyncClient, question: str) -> dict:
    response = await client.post("/v1/projects/P/answer", json={"question": question})
    assert response.status_code == 200
    return response.json()


@pytest.mark.asyncio
async def test_rule_lifecycle_from_draft_to_cited_answer(async_client: AsyncClient):
    client = async_client

    # Before anything is published the assistant refuses
    body = await _ask(client, "What are the reporting obligations?")
    assert body["refused"] is True
    assert body["citations"] == []

    response = await client.post(
        "/v1/rules", json={"project_id": "P", "jurisdiction": "EU", "topic_key": "reporting"}
    )
    assert response.status_code == 200
    rule_id = response.json()["id"]

    response = await client.post(f"/v1/rules/{rule_id}/versions", json={
        "content": "Firms must file reporting obligations annually.",
        "source_refs": SOURCE_REFS,
    })
    assert response.status_code == 200
    v1 = response.json()
    assert v1["version"] == 1
    assert v1["status"] == "draft"

    await _approve(client, v1["id"])
    s1 = await _publish(client)

    body = await _ask(client, "What are the reporting obligations?")
    assert body["refused"] is False
    assert body["kb_snapshot_id"] == s1
    assert [c["rule_version_id"] for c in body["citations"]] == [v1["id"]]
    assert all(c["kb_snapshot_id"] == s1 for c in body["citations"])

    response = await client.post(f"/v1/rules/{rule_id}/versions", json={
        "content": "Firms must file updated obligations quarterly.",
        "source_refs": SOURCE_REFS,
    })
    v2 = response.json()
    assert v2["version"] == 2
    await _approve(client, v2["id"])

    # S1 stays frozen: the new wording is not visible until a new publish
    body = await _ask(client, "updated obligations")
    assert body["refused"] is True

    response = await client.post("/v1/change-candidates", json={
        "project_id": "P",
        "jurisdiction": "EU",
        "diff_summary": "Annual filing becomes quarterly",
        "risk_level": "high",
        "proposed_rule_version_ids": [v2["id"]],
    })
    candidate_id = response.json()["id"]

    response = await client.post(f"/v1/change-candidates/{candidate_id}/review-tasks")
    task = response.json()
    assert task["assigned_role"] == "expert"

    response = await client.post(f"/v1/review-tasks/{task['id']}/decision", json={
        "decision": "approve", "decided_by_role": "expert", "decided_by": "expert@example.com",
    })
    assert response.status_code == 200

    response = await client.post("/v1/review/publish-readiness", json={"jurisdiction": "EU"})
    assert response.json() == {"published": True}

    s2 = await _publish(client)
    assert s2 != s1

    response = await client.get("/v1/projects/P/context")
    assert response.json()["kb_snapshot_id"] == s2

    body = await _ask(client, "updated obligations")
    assert body["refused"] is False
    assert body["kb_snapshot_id"] == s2
    assert [c["rule_version_id"] for c in body["citations"]] == [v2["id"]]

    # S1 is still retrievable and unchanged
    response = await client.get(f"/v1/snapshots/{s1}")
    assert response.json()["included_rule_version_ids"] == [v1["id"]]

    response = await client.get("/v1/projects/P/audit")
    event_types = [e["event_type"] for e in response.json()]
    assert event_types.count("SNAPSHOT_PUBLISHED") == 2
    assert "REVIEW_DECIDED" in event_types
    assert event_types.count("RULE_VERSION_APPROVED") == 2
