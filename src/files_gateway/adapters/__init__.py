"""
Adapter layer for the Files Gateway.

Contains the object store capability and its backends (local filesystem/S3).
Provides mode-aware implementations that work across deployment environments.
"""
