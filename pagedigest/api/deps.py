from __future__ import annotations

from fastapi import Request

from pagedigest.agents.orchestrator import WebSearchPipeline


def get_pipeline(request: Request) -> WebSearchPipeline:
    """Pipeline built once in the app lifespan."""
    return request.app.state.pipeline
