"""Genesis chain spec construction.

This module builds the migration allowlist and merges origin
storage into a template chain spec.
"""
