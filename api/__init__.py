"""Tracewise API Service.

This package contains the FastAPI application and the agent pipeline
for the Tracewise troubleshooting assistant.

Main components:
- main.py: FastAPI application with endpoints
- models.py: Pydantic models for requests and responses
- orchestrators/: session manager, intent classifier, capability router
- composer/: answer synthesis prompts and synthesizer
- tools/: capability descriptors and providers
- llm/: embedding and chat model clients
"""

# Avoid importing heavy modules (e.g., FastAPI app) at package import time to
# prevent side effects when tools import `api.*`.
__all__ = []
