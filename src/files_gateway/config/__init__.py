"""
Configuration management for the Files Gateway.

Contains the Pydantic settings that select the object store backend for the
local-dev, aws-mock, and aws-prod deployment modes.
"""
