"""Origin state download.

This module enumerates the remote keyspace by prefix partitions
and streams the retrieved pairs into a snapshot artifact.
"""
