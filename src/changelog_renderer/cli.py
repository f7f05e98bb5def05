"""Command-line entry point for rendering a changelog.

Usage:
    changelog-render --input releases.json --config changelog.yaml
    cat releases.json | changelog-render > CHANGELOG.md

The input is a JSON array of releases as produced by the issue provider.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from pydantic import TypeAdapter

from changelog_renderer.config import load_render_config
from changelog_renderer.logging_config import get_logger, setup_logging
from changelog_renderer.renderer import MarkdownRenderer
from changelog_renderer.schemas import Release

logger = get_logger(__name__)

_releases_adapter = TypeAdapter(list[Release])


def main(argv: list[str] | None = None) -> None:
    """Render the releases given on --input (or stdin) to Markdown."""
    parser = argparse.ArgumentParser(description="Render a Markdown changelog")
    parser.add_argument(
        "--input", "-i",
        type=str,
        help="Path to JSON file with releases (reads stdin if omitted)",
    )
    parser.add_argument(
        "--config", "-c",
        type=str,
        help="Path to YAML renderer config",
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        help="Write the changelog to this file instead of stdout",
    )
    args = parser.parse_args(argv)

    if not args.input and sys.stdin.isatty():
        parser.print_usage()
        print("Provide --input FILE or pipe JSON via stdin.")
        return

    setup_logging()

    if args.input:
        with open(args.input, encoding="utf-8") as f:
            data = json.load(f)
    else:
        data = json.load(sys.stdin)

    releases = _releases_adapter.validate_python(data)
    options = load_render_config(args.config)

    markdown = MarkdownRenderer(options).render_markdown(releases)

    if args.output:
        Path(args.output).write_text(markdown, encoding="utf-8")
        logger.info("changelog_written", path=args.output, releases_count=len(releases))
    else:
        sys.stdout.write(markdown)


if __name__ == "__main__":
    main()
