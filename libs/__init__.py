"""Tracewise shared libraries.

This package contains reusable components:
- common: Configuration
- caching: Redis client, vector index, and semantic cache
- memory: Durable session state storage
"""
