"""
Job runners for the cognitive offboarding feature.
"""

from .org_scan_job import run_org_scan_job, start_org_scan_scheduler

__all__ = ["run_org_scan_job", "start_org_scan_scheduler"]
