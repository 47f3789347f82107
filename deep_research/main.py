"""Command-line entrypoint.

  python -m deep_research.main "How are solid-state batteries scaling?"

Asks the model for follow-up questions that would sharpen the research
direction, then runs one round of SERP queries through Brave (when a key
is configured) and prints what was learned.

Logging: structured JSON on stdout plus the append-only debug.log.
Set LOG_FORMAT=pretty for development-friendly output.
"""

import asyncio
import sys

# Configure structured logging BEFORE importing anything else
from deep_research.utils.logging import configure_logging, get_logger, log  # noqa: E402

configure_logging()

MODULE = "main"
logger = get_logger()

from deep_research.research import (  # noqa: E402
    generate_feedback,
    generate_serp_queries,
    process_serp_result,
)
from deep_research.tools.brave import is_available as brave_available, search_brave  # noqa: E402


async def main(query: str) -> None:
    log.info(logger, MODULE, "start", "Research starting", query=query[:80])

    questions = await generate_feedback(query)
    print("Follow-up questions:")
    for question in questions:
        print(f"  - {question}")

    if not brave_available():
        log.info(logger, MODULE, "search_skipped", "BRAVE_API_KEY not set, stopping here")
        return

    for serp_query in await generate_serp_queries(query):
        results = await search_brave(serp_query)
        if not results:
            continue
        output = await process_serp_result(serp_query, results)
        print(f"\n{serp_query}:")
        for learning in output.learnings:
            print(f"  * {learning}")

    log.info(logger, MODULE, "done", "Research finished")


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print('usage: python -m deep_research.main "<query>"', file=sys.stderr)
        sys.exit(2)
    try:
        asyncio.run(main(" ".join(sys.argv[1:])))
    except KeyboardInterrupt:
        log.info(logger, MODULE, "stopped", "Stopped by keyboard interrupt")
