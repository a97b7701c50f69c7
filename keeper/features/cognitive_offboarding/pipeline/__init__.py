"""
Scan pipeline: per-user intensity scoring and the organization-wide scanner.
"""
