"""Fork orchestration.

This module coordinates artifacts, download, and merge stages
into one fork run.
"""
