import pytest
from uuid import uuid4
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from src.review.models import (
    ReviewDecision,
    ReviewRole,
    ReviewTaskStatus,
    RiskLevel,
    role_for_risk,
)
from src.review.schemas import ChangeCandidateCreate
from src.review.service import ReviewService
from src.shared.errors import ErrorCode, KnowledgeBaseError


async def _candidate(service: ReviewService, risk_level=RiskLevel.LOW, jurisdiction="EU", proposed=None):
    return await service.create_change_candidate(ChangeCandidateCreate(
        project_id="project-p",
        jurisdiction=jurisdiction,
        diff_summary="Reporting deadline moved",
        risk_level=risk_level,
        proposed_rule_version_ids=proposed or [],
    ))


def test_role_for_risk():
    assert role_for_risk(RiskLevel.LOW) == ReviewRole.CURATOR
    assert role_for_risk(RiskLevel.MEDIUM) == ReviewRole.CURATOR
    assert role_for_risk(RiskLevel.HIGH) == ReviewRole.EXPERT


@pytest.mark.asyncio
async def test_create_review_task_assigns_role_from_risk(db_session: AsyncSession):
    service = ReviewService(db_session)
    low = await _candidate(service, RiskLevel.LOW)
    high = await _candidate(service, RiskLevel.HIGH)

    low_task = await service.create_review_task(low.id)
    high_task = await service.create_review_task(high.id)

    assert low_task.assigned_role == ReviewRole.CURATOR
    assert high_task.assigned_role == ReviewRole.EXPERT
    assert low_task.status == ReviewTaskStatus.OPEN
    assert low_task.decision is None


@pytest.mark.asyncio
async def test_create_review_task_unknown_candidate(db_session: AsyncSession):
    with pytest.raises(KnowledgeBaseError) as exc:
        await ReviewService(db_session).create_review_task(uuid4())
    assert exc.value.code == ErrorCode.CHANGE_CANDIDATE_NOT_FOUND


@pytest.mark.asyncio
async def test_curator_cannot_approve_high_risk(db_session: AsyncSession):
    service = ReviewService(db_session)
    candidate = await _candidate(service, RiskLevel.HIGH)
    task = await service.create_review_task(candidate.id)

    with pytest.raises(KnowledgeBaseError) as exc:
        await service.submit_decision(task.id, ReviewDecision.APPROVE, ReviewRole.CURATOR, "carol")
    assert exc.value.code == ErrorCode.FORBIDDEN_ROLE

    unchanged = await service.get_review_task(task.id)
    assert unchanged.status == ReviewTaskStatus.OPEN


@pytest.mark.asyncio
async def test_curator_may_reject_high_risk(db_session: AsyncSession):
    service = ReviewService(db_session)
    candidate = await _candidate(service, RiskLevel.HIGH)
    task = await service.create_review_task(candidate.id)

    decided = await service.submit_decision(task.id, ReviewDecision.REJECT, ReviewRole.CURATOR, "carol")

    assert decided.status == ReviewTaskStatus.DECIDED
    assert decided.decision == ReviewDecision.REJECT
    assert decided.decided_by == "carol"
    assert decided.decided_at is not None


@pytest.mark.asyncio
async def test_expert_approves_high_risk(db_session: AsyncSession):
    service = ReviewService(db_session)
    candidate = await _candidate(service, RiskLevel.HIGH)
    task = await service.create_review_task(candidate.id)

    decided = await service.submit_decision(task.id, ReviewDecision.APPROVE, ReviewRole.EXPERT, "erin")

    assert decided.decision == ReviewDecision.APPROVE


@pytest.mark.asyncio
async def test_decision_is_final(db_session: AsyncSession):
    service = ReviewService(db_session)
    candidate = await _candidate(service)
    task = await service.create_review_task(candidate.id)
    task_id = task.id

    await service.submit_decision(task_id, ReviewDecision.APPROVE, ReviewRole.CURATOR, "carol")
    with pytest.raises(KnowledgeBaseError) as exc:
        await service.submit_decision(task_id, ReviewDecision.REJECT, ReviewRole.EXPERT, "erin")
    assert exc.value.code == ErrorCode.REVIEW_TASK_ALREADY_DECIDED

    stored = await service.get_review_task(task_id)
    await db_session.refresh(stored)
    assert stored.decision == ReviewDecision.APPROVE
    assert stored.decided_by == "carol"


@pytest.mark.asyncio
async def test_submit_decision_unknown_task(db_session: AsyncSession):
    with pytest.raises(KnowledgeBaseError) as exc:
        await ReviewService(db_session).submit_decision(
            uuid4(), ReviewDecision.APPROVE, ReviewRole.EXPERT, "erin"
        )
    assert exc.value.code == ErrorCode.REVIEW_TASK_NOT_FOUND


@pytest.mark.asyncio
async def test_list_review_tasks_filters_by_status(db_session: AsyncSession):
    service = ReviewService(db_session)
    first = await service.create_review_task((await _candidate(service)).id)
    second = await service.create_review_task((await _candidate(service)).id)
    first_id, second_id = first.id, second.id
    await service.submit_decision(first_id, ReviewDecision.REJECT, ReviewRole.CURATOR, "carol")

    open_tasks = await service.list_review_tasks(ReviewTaskStatus.OPEN)
    all_tasks = await service.list_review_tasks()

    assert [t.id for t in open_tasks] == [second_id]
    assert {t.id for t in all_tasks} == {first_id, second_id}


# ---------------------------------------------------------------------------
# publish_if_ready
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_ready_with_no_review_activity(db_session: AsyncSession):
    assert await ReviewService(db_session).publish_if_ready("EU") is True


@pytest.mark.asyncio
async def test_not_ready_while_any_task_is_open(db_session: AsyncSession):
    service = ReviewService(db_session)
    # Open task in another jurisdiction still blocks
    candidate = await _candidate(service, jurisdiction="UK")
    await service.create_review_task(candidate.id)

    with pytest.raises(KnowledgeBaseError) as exc:
        await service.publish_if_ready("EU")
    assert exc.value.code == ErrorCode.NOT_READY


@pytest.mark.asyncio
async def test_not_ready_when_approved_change_proposes_draft(db_session: AsyncSession, make_rule_version):
    draft = await make_rule_version(approve=False)
    service = ReviewService(db_session)
    candidate = await _candidate(service, proposed=[draft.id])
    task = await service.create_review_task(candidate.id)
    await service.submit_decision(task.id, ReviewDecision.APPROVE, ReviewRole.CURATOR, "carol")

    with pytest.raises(KnowledgeBaseError) as exc:
        await service.publish_if_ready("EU")
    assert exc.value.code == ErrorCode.NOT_READY
    assert str(draft.id) in exc.value.message


@pytest.mark.asyncio
async def test_not_ready_when_proposed_version_does_not_exist(db_session: AsyncSession):
    service = ReviewService(db_session)
    candidate = await _candidate(service, proposed=[uuid4()])
    task = await service.create_review_task(candidate.id)
    await service.submit_decision(task.id, ReviewDecision.APPROVE, ReviewRole.CURATOR, "carol")

    with pytest.raises(KnowledgeBaseError) as exc:
        await service.publish_if_ready("EU")
    assert exc.value.code == ErrorCode.NOT_READY


@pytest.mark.asyncio
async def test_ready_ignores_rejected_and_other_jurisdictions(db_session: AsyncSession, make_rule_version):
    draft = await make_rule_version(approve=False)
    service = ReviewService(db_session)

    rejected = await _candidate(service, proposed=[draft.id])
    rejected_task = await service.create_review_task(rejected.id)
    await service.submit_decision(rejected_task.id, ReviewDecision.REJECT, ReviewRole.CURATOR, "carol")

    elsewhere = await _candidate(service, jurisdiction="UK", proposed=[draft.id])
    elsewhere_task = await service.create_review_task(elsewhere.id)
    await service.submit_decision(elsewhere_task.id, ReviewDecision.APPROVE, ReviewRole.CURATOR, "carol")

    assert await service.publish_if_ready("EU") is True


@pytest.mark.asyncio
async def test_ready_when_proposed_versions_are_approved(db_session: AsyncSession, make_rule_version):
    approved = await make_rule_version()
    service = ReviewService(db_session)
    candidate = await _candidate(service, RiskLevel.HIGH, proposed=[approved.id])
    task = await service.create_review_task(candidate.id)
    await service.submit_decision(task.id, ReviewDecision.APPROVE, ReviewRole.EXPERT, "erin")

    assert await service.publish_if_ready("EU") is True


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_review_endpoints(async_client: AsyncClient):
    response = await async_client.post("/v1/change-candidates", json={
        "project_id": "project-p",
        "jurisdiction": "EU",
        "diff_summary": "New threshold",
        "risk_level": "high",
    })
    assert response.status_code == 200
    candidate_id = response.json()["id"]

    response = await async_client.post(f"/v1/change-candidates/{candidate_id}/review-tasks")
    assert response.status_code == 200
    assert response.json()["assigned_role"] == "expert"
    task_id = response.json()["id"]

    response = await async_client.post("/v1/review/publish-readiness", json={"jurisdiction": "EU"})
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "NOT_READY"

    response = await async_client.post(f"/v1/review-tasks/{task_id}/decision", json={
        "decision": "approve", "decided_by_role": "curator", "decided_by": "carol",
    })
    assert response.status_code == 403
    assert response.json()["detail"]["code"] == "FORBIDDEN_ROLE"

    response = await async_client.post(f"/v1/review-tasks/{task_id}/decision", json={
        "decision": "approve", "decided_by_role": "expert", "decided_by": "erin",
    })
    assert response.status_code == 200
    assert response.json() == {"id": task_id, "status": "decided"}

    response = await async_client.post(f"/v1/review-tasks/{task_id}/decision", json={
        "decision": "reject", "decided_by_role": "expert", "decided_by": "erin",
    })
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "REVIEW_TASK_ALREADY_DECIDED"

    response = await async_client.post("/v1/review/publish-readiness", json={"jurisdiction": "EU"})
    assert response.status_code == 200
    assert response.json() == {"published": True}


@pytest.mark.asyncio
async def test_review_task_not_found_endpoint(async_client: AsyncClient):
    response = await async_client.get(f"/v1/review-tasks/{uuid4()}")
    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "REVIEW_TASK_NOT_FOUND"
