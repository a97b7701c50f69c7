"""
Cognitive offboarding feature package.

Houses the domain model, scan pipeline, interview agent, workflow
orchestrator, jobs and API router for capturing a departing engineer's
undocumented knowledge.
"""
