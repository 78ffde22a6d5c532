"""Dev CLI for paper-graph.

Usage:
    python -m paper_graph path <author_from> <author_to>
    python -m paper_graph search <title_query> [--author <author_query>]
"""

from __future__ import annotations

import asyncio
import logging
import sys

USAGE = (
    "Usage: python -m paper_graph path <author_from> <author_to>\n"
    "       python -m paper_graph search <title_query> [--author <author_query>]"
)


def main() -> None:
    args = sys.argv[1:]
    if len(args) < 2 or args[0] not in {"path", "search"}:
        print(USAGE, file=sys.stderr)
        sys.exit(1)

    from paper_graph.config import load_config

    config = load_config()
    logging.basicConfig(level=config.log_level)

    try:
        output = asyncio.run(_run(args, config))
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(output)


async def _run(args: list[str], config) -> str:
    from paper_graph.engine import QueryEngine
    from paper_graph.export import export_markdown, export_path_markdown

    command, rest = args[0], args[1:]
    async with QueryEngine.from_config(config) as engine:
        if command == "path":
            if len(rest) != 2:
                raise ValueError("path takes exactly two author names")
            result = await engine.shortest_path(rest[0], rest[1])
            return export_path_markdown(result)

        author = None
        if "--author" in rest:
            idx = rest.index("--author")
            if idx + 1 >= len(rest):
                raise ValueError("--author needs a value")
            author = rest[idx + 1]
            rest = rest[:idx] + rest[idx + 2:]
        title = " ".join(rest) or None
        result = await engine.filter_papers(title=title, author=author)
        return export_markdown(result)


if __name__ == "__main__":
    main()
