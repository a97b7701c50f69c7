"""
Organization gap scanner package.
"""

from .service import GapScanner, OrganizationScan, SkippedUser, recommended_actions

__all__ = ["GapScanner", "OrganizationScan", "SkippedUser", "recommended_actions"]
