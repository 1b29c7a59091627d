"""Entry point for ``python -m codeprobe``."""

from __future__ import annotations

import argparse
import asyncio
import sys

import structlog

from codeprobe.agent_loop import AgentLoopExecutor, LoopConfig, build_messages
from codeprobe.config import Settings
from codeprobe.llm import LLMClient
from codeprobe.logger import setup_logging, stop_logging
from codeprobe.tools import ProjectRoot, ProjectRootError, build_default_registry

logger = structlog.get_logger()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="codeprobe",
        description="Answer a question about a project using read-only inspection tools.",
    )
    parser.add_argument("project_dir", help="Project directory the tools are confined to")
    parser.add_argument("question", help="Question to answer about the project")
    parser.add_argument("--model", help="Model identifier (default: $CODEPROBE_MODEL)")
    parser.add_argument("--max-iterations", type=int, help="Model round trips before giving up")
    parser.add_argument("--log-level", help="Log level (default: $CODEPROBE_LOG_LEVEL)")
    return parser.parse_args(argv)


async def ask(settings: Settings, root: ProjectRoot, question: str) -> int:
    """Run one question through the agent loop and print the answer."""
    llm = LLMClient(base_url=settings.llm_url, api_key=settings.llm_api_key)
    registry = build_default_registry(root, timeout=settings.tool_timeout)
    executor = AgentLoopExecutor(llm, registry)
    config = LoopConfig(model=settings.model, max_iterations=settings.max_iterations)

    logger.info("question", project=str(root), model=config.model, question=question)
    try:
        result = await executor.run(build_messages(root, question), config)
    finally:
        await llm.close()

    logger.info(
        "done",
        steps=result.step_count,
        tokens_in=result.total_tokens_in,
        tokens_out=result.total_tokens_out,
        error=result.error or None,
    )
    if result.error:
        print(f"error: {result.error}", file=sys.stderr)
        return 1
    print(result.final_content)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = Settings()
    if args.model:
        settings.model = args.model
    if args.max_iterations and args.max_iterations > 0:
        settings.max_iterations = args.max_iterations
    if args.log_level:
        settings.log_level = args.log_level

    try:
        root = ProjectRoot.from_path(args.project_dir)
    except ProjectRootError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    setup_logging(service=settings.log_service, level=settings.log_level, fmt=settings.log_format)
    try:
        return asyncio.run(ask(settings, root, args.question))
    finally:
        stop_logging()


if __name__ == "__main__":
    sys.exit(main())
