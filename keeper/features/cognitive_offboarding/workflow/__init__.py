"""
Workflow orchestration for cognitive offboarding sessions.
"""

from .knowledge import NO_RESPONSES_CONTENT, build_tags, format_interview_content
from .orchestrator import WorkflowOrchestrator
from .session_store import InMemorySessionStore

__all__ = [
    "NO_RESPONSES_CONTENT",
    "InMemorySessionStore",
    "WorkflowOrchestrator",
    "build_tags",
    "format_interview_content",
]
