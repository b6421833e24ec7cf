"""
Adapter layer for the Voice Clone API.

Contains abstraction adapters for blob storage (local/S3), the status
key-value store (SQLite/DynamoDB) and job queuing (local/SQS).
Provides mode-aware implementations that work across deployment environments.
"""
