"""Split a raw issue body into the blocks the renderer reads.

GitHub-flavored pipe tables become TableBlock; every other run of
non-blank lines becomes a MarkdownBlock tagged "paragraph". Only tables
matter downstream, so nothing else is interpreted.

    | 種別 | 診断対象 |
    |------|----------|
    | URL  | https://api.example.com |

parses to TableBlock(header=["種別", "診断対象"],
                     cells=[["URL", "https://api.example.com"]]).
"""

from __future__ import annotations

import re

from changelog_renderer.schemas import MarkdownBlock, ParsedBlock, TableBlock

_DELIMITER_CELL = re.compile(r"^:?-+:?$")


def parse_body(text: str | None) -> list[ParsedBlock]:
    """Parse an issue body into an ordered list of blocks.

    Args:
        text: Raw issue body; None and "" yield no blocks

    Returns:
        Tables and paragraphs in document order
    """
    if not text:
        return []

    blocks: list[ParsedBlock] = []
    paragraph: list[str] = []
    lines = text.replace("\r\n", "\n").split("\n")

    def flush_paragraph() -> None:
        if paragraph:
            blocks.append(MarkdownBlock(type="paragraph", text="\n".join(paragraph)))
            paragraph.clear()

    i = 0
    while i < len(lines):
        line = lines[i].strip()

        if _is_table_row(line) and i + 1 < len(lines) and _is_delimiter_row(lines[i + 1].strip()):
            flush_paragraph()
            header = _split_row(line)
            rows: list[list[str]] = []
            i += 2
            while i < len(lines) and _is_table_row(lines[i].strip()):
                rows.append(_split_row(lines[i].strip()))
                i += 1
            blocks.append(TableBlock(header=header, cells=rows))
            continue

        if line:
            paragraph.append(line)
        else:
            flush_paragraph()
        i += 1

    flush_paragraph()
    return blocks


def _is_table_row(line: str) -> bool:
    return line.startswith("|")


def _is_delimiter_row(line: str) -> bool:
    if not _is_table_row(line):
        return False
    cells = _split_row(line)
    return bool(cells) and all(_DELIMITER_CELL.match(cell) for cell in cells)


def _split_row(line: str) -> list[str]:
    inner = line.strip()
    if inner.startswith("|"):
        inner = inner[1:]
    if inner.endswith("|"):
        inner = inner[:-1]
    return [cell.strip() for cell in inner.split("|")]
