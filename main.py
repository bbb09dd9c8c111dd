"""PageDigest - web page summarizer

Simple CLI for discovering URLs for a query or summarizing a set of URLs.
"""

import argparse
import asyncio
import json

from pagedigest.agents.orchestrator import DISCOVERY_MODE, WebSearchPipeline
from pagedigest.config import get_settings


async def run(query: str | None, urls: list[str] | None):
    """Run one pipeline request and print its JSON result."""
    pipeline = WebSearchPipeline.from_settings(get_settings())
    try:
        if query:
            print(f"Discovering URLs for: {query}")
            result = await pipeline.run(query, [("human", query)], mode=DISCOVERY_MODE)
        else:
            print(f"Summarizing {len(urls or [])} URL(s)")
            result = await pipeline.run(urls or [], mode="summarize")
    finally:
        await pipeline.close()

    print("-" * 50)
    print(json.dumps(result, indent=2, ensure_ascii=False, default=str))


def main():
    parser = argparse.ArgumentParser(description="PageDigest web page summarizer")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--query", "-q", help="Search query; prints candidate URLs")
    group.add_argument("--urls", "-u", nargs="+", help="URLs to summarize")

    args = parser.parse_args()

    asyncio.run(run(args.query, args.urls))


if __name__ == "__main__":
    main()
