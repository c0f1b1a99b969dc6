"""Origin chain state access.

This module talks to the live chain over JSON-RPC and decodes
runtime metadata into storage partition names.
"""
