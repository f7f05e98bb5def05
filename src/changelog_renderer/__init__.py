"""Changelog renderer.

Renders a Markdown changelog from releases whose commits are already
categorized and linked to GitHub issues, including a security test
target appendix extracted from tables in issue bodies.
"""

__version__ = "0.1.0"
