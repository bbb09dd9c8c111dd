from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pagedigest.agents.orchestrator import WebSearchPipeline
from pagedigest.api.routes import websearch
from pagedigest.config import get_settings
from pagedigest.models.schemas import HealthResponse


@asynccontextmanager
async def lifespan(app: FastAPI):
    pipeline = WebSearchPipeline.from_settings(get_settings())
    app.state.pipeline = pipeline
    yield
    await pipeline.close()


app = FastAPI(
    title="PageDigest",
    description="Search, fetch and summarize web pages with a URL-keyed summary cache",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(websearch.router)


@app.get("/api/health", response_model=HealthResponse)
async def health():
    return {"status": "ok", "service": "pagedigest"}
