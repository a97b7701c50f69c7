import asyncio

import pytest

from keeper.features.cognitive_offboarding.domain.errors import (
    GENERIC_PERMISSION_MESSAGE,
    ArchiveError,
    InterviewError,
    PermissionDeniedError,
    PhaseOrderError,
    ScanError,
    SessionNotFoundError,
    ValidationError,
)
from keeper.features.cognitive_offboarding.domain.models import RiskLevel
from keeper.features.cognitive_offboarding.domain.session_models import (
    InterviewResponse,
    WorkflowState,
)
from keeper.features.cognitive_offboarding.interview.agent import ForensicInterviewAgent
from keeper.features.cognitive_offboarding.pipeline.scoring.service import (
    IntensityScoringService,
)
from keeper.features.cognitive_offboarding.workflow.knowledge import NO_RESPONSES_CONTENT
from keeper.features.cognitive_offboarding.workflow.orchestrator import WorkflowOrchestrator


@pytest.mark.asyncio
async def test_trigger_registers_session(orchestrator):
    session = await orchestrator.trigger("user123", department="Payments", role="Staff Engineer")

    assert session.state is WorkflowState.TRIGGERED
    assert session.progress_percentage == 0
    assert session.department == "Payments"
    assert orchestrator.get_workflow_session(session.session_id) is session
    assert orchestrator.get_all_active_sessions() == [session]


@pytest.mark.asyncio
async def test_trigger_requires_employee_id(orchestrator):
    with pytest.raises(ValidationError):
        await orchestrator.trigger("")


@pytest.mark.asyncio
async def test_unknown_session_is_reported(orchestrator):
    with pytest.raises(SessionNotFoundError):
        await orchestrator.execute_scan_phase("missing")

    assert orchestrator.get_workflow_session("missing") is None


@pytest.mark.asyncio
async def test_interview_before_scan_is_a_phase_order_error(orchestrator):
    session = await orchestrator.trigger("user123")

    with pytest.raises(PhaseOrderError, match="Scan phase must be completed before interview phase"):
        await orchestrator.execute_interview_phase(session.session_id)

    assert session.state is WorkflowState.TRIGGERED


@pytest.mark.asyncio
async def test_archive_before_interview_is_a_phase_order_error(orchestrator):
    session = await orchestrator.trigger("user123")
    await orchestrator.execute_scan_phase(session.session_id)

    with pytest.raises(PhaseOrderError):
        await orchestrator.execute_archive_phase(session.session_id, [])

    assert session.state is WorkflowState.SCAN_COMPLETE


@pytest.mark.asyncio
async def test_scan_phase_runs_only_once(orchestrator):
    session = await orchestrator.trigger("user123")
    await orchestrator.execute_scan_phase(session.session_id)

    with pytest.raises(PhaseOrderError):
        await orchestrator.execute_scan_phase(session.session_id)


@pytest.mark.asyncio
async def test_phases_progress_through_states(orchestrator, archive_writer):
    session = await orchestrator.trigger("user123", role="Staff Engineer")

    report = await orchestrator.execute_scan_phase(session.session_id)
    assert session.state is WorkflowState.SCAN_COMPLETE
    assert session.progress_percentage == 40
    assert report.score == 3.0
    assert report.risk_level is RiskLevel.MEDIUM

    interview = await orchestrator.execute_interview_phase(session.session_id)
    assert session.state is WorkflowState.INTERVIEW_COMPLETE
    assert session.progress_percentage == 70
    # two tickets, one PR, one recent commit
    assert interview.artifacts_analyzed == 4
    assert interview.questions_generated == 4
    assert interview.interview.contextual_info["recent_pr_count"] == 1
    assert interview.interview.contextual_info["commit_count"] == 1

    responses = [
        InterviewResponse(
            question=interview.interview.questions[0].text,
            answer="The retry is a temporary workaround; it will break if the settlement file is late.",
            artifact_id="PAY-101",
        )
    ]
    archive = await orchestrator.execute_archive_phase(session.session_id, responses)

    assert session.state is WorkflowState.ARCHIVED
    assert session.progress_percentage == 100
    artifact = archive.knowledge_artifact
    assert artifact.title == "Cognitive Offboarding - Staff Engineer"
    assert artifact.related_tickets == ["PAY-101", "PAY-102"]
    assert artifact.related_prs == ["42"]
    assert artifact.related_commits == ["a1b2c3d4e5f6a7b8"]
    assert [link.url for link in artifact.artifact_links][:3] == [
        "https://acme.atlassian.net/browse/PAY-101",
        "https://acme.atlassian.net/browse/PAY-102",
        "https://bitbucket.org/acme/payments/pull-requests/42",
    ]
    assert {"PAY-101", "PAY-102", "PR #42"} <= set(archive.artifacts_linked)
    assert "Critical Insights Extracted" in artifact.content
    assert "cognitive-offboarding" in artifact.tags
    assert "risk-medium" in artifact.tags
    assert len(archive_writer.pages) == 1


@pytest.mark.asyncio
async def test_empty_responses_are_marked_as_automated_only(orchestrator):
    session = await orchestrator.execute_complete_workflow("user123")

    artifact = session.archive_results.knowledge_artifact
    assert artifact.content == NO_RESPONSES_CONTENT
    assert "No interview responses captured" in artifact.content
    assert artifact.confidence == 0.5


@pytest.mark.asyncio
async def test_complete_workflow_validates(orchestrator):
    session = await orchestrator.execute_complete_workflow("user123", role="SRE")

    validation = orchestrator.validate_workflow_completion(session.session_id)

    assert validation.is_valid is True
    assert validation.errors == []


@pytest.mark.asyncio
async def test_validation_of_triggered_session_lists_missing_results(orchestrator):
    session = await orchestrator.trigger("user123")

    validation = orchestrator.validate_workflow_completion(session.session_id)

    assert validation.is_valid is False
    assert "Workflow not completed. Current state: TRIGGERED" in validation.errors
    assert "Scan results missing" in validation.errors
    assert "Interview results missing" in validation.errors
    assert "Archive results missing" in validation.errors


def test_validation_of_unknown_session(orchestrator):
    validation = orchestrator.validate_workflow_completion("nope")

    assert validation.is_valid is False
    assert validation.errors == ["Session not found"]


@pytest.mark.asyncio
async def test_scan_failure_moves_session_to_failed(seeded_source, archive_writer):
    seeded_source.failing_users["user123"] = RuntimeError("jira returned 500")
    orchestrator = WorkflowOrchestrator(
        IntensityScoringService(seeded_source), ForensicInterviewAgent(), archive_writer
    )
    session = await orchestrator.trigger("user123")

    with pytest.raises(ScanError, match="jira returned 500"):
        await orchestrator.execute_scan_phase(session.session_id)

    assert session.state is WorkflowState.FAILED
    assert session.progress_percentage == 0
    assert session.errors[0].code == "SCAN_FAILED"
    with pytest.raises(PhaseOrderError):
        await orchestrator.execute_interview_phase(session.session_id)


@pytest.mark.asyncio
async def test_permission_failure_propagates_generic_message(seeded_source, archive_writer):
    seeded_source.failing_users["user123"] = PermissionDeniedError("bitbucket")
    orchestrator = WorkflowOrchestrator(
        IntensityScoringService(seeded_source), ForensicInterviewAgent(), archive_writer
    )
    session = await orchestrator.trigger("user123")

    with pytest.raises(PermissionDeniedError) as exc:
        await orchestrator.execute_scan_phase(session.session_id)

    assert exc.value.message == GENERIC_PERMISSION_MESSAGE
    assert exc.value.session_id == session.session_id
    assert session.state is WorkflowState.FAILED


@pytest.mark.asyncio
async def test_interview_agent_failure_is_wrapped(seeded_source, archive_writer):
    class BrokenAgent(ForensicInterviewAgent):
        async def conduct_interview(self, context):
            raise RuntimeError("agent offline")

    orchestrator = WorkflowOrchestrator(
        IntensityScoringService(seeded_source), BrokenAgent(), archive_writer
    )
    session = await orchestrator.trigger("user123")
    await orchestrator.execute_scan_phase(session.session_id)

    with pytest.raises(InterviewError, match="agent offline"):
        await orchestrator.execute_interview_phase(session.session_id)

    assert session.state is WorkflowState.FAILED


@pytest.mark.asyncio
async def test_archive_failure_leaves_session_failed(seeded_source):
    from keeper.features.cognitive_offboarding.domain.session_models import ArchivePageResult

    class BrokenWriter:
        async def create_archive_page(self, artifact) -> ArchivePageResult:
            raise RuntimeError("confluence 503")

    orchestrator = WorkflowOrchestrator(
        IntensityScoringService(seeded_source), ForensicInterviewAgent(), BrokenWriter()
    )

    with pytest.raises(ArchiveError, match="confluence 503"):
        await orchestrator.execute_complete_workflow("user123")

    [session] = orchestrator.get_all_active_sessions()
    assert session.state is WorkflowState.FAILED
    assert session.interview_results is not None
    assert session.archive_results is None


@pytest.mark.asyncio
async def test_phase_timeout_fails_the_phase(seeded_source, archive_writer):
    class SlowAgent(ForensicInterviewAgent):
        async def conduct_interview(self, context):
            await asyncio.sleep(5)

    orchestrator = WorkflowOrchestrator(
        IntensityScoringService(seeded_source), SlowAgent(), archive_writer, phase_timeout=0.01
    )
    session = await orchestrator.trigger("user123")
    await orchestrator.execute_scan_phase(session.session_id)

    with pytest.raises(InterviewError, match="timed out"):
        await orchestrator.execute_interview_phase(session.session_id)

    assert session.state is WorkflowState.FAILED


@pytest.mark.asyncio
async def test_concurrent_scan_calls_run_the_phase_once(orchestrator, seeded_source):
    session = await orchestrator.trigger("user123")

    results = await asyncio.gather(
        orchestrator.execute_scan_phase(session.session_id),
        orchestrator.execute_scan_phase(session.session_id),
        return_exceptions=True,
    )

    assert sum(isinstance(r, PhaseOrderError) for r in results) == 1
    assert [kind for kind, _ in seeded_source.calls].count("tickets") == 1


@pytest.mark.asyncio
async def test_validation_flags_scanned_artifacts_missing_from_archive(orchestrator):
    session = await orchestrator.execute_complete_workflow("user123")
    artifact = session.archive_results.knowledge_artifact
    artifact.source_artifacts = [a for a in artifact.source_artifacts if a.reference != "PR #42"]

    validation = orchestrator.validate_workflow_completion(session.session_id)

    assert validation.is_valid is False
    assert validation.errors == [
        "Artifact references not maintained from scan to archive: PR #42"
    ]
