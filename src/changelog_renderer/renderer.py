"""Markdown rendering for releases.

Turns a list of releases into a changelog document:

    ## v1.2.0 (2024-03-01)

    #### :bug: Bug Fix
    * [#12](https://github.com/org/repo/pull/12) Closes [#11](...) ([@dev](...))

    #### 脆弱診断対象

    ##### URL
    * https://api.example.com

The renderer is pure. It never mutates the releases it is given, so one
instance can be shared between threads and reused across calls.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from changelog_renderer.logging_config import get_logger
from changelog_renderer.schemas import (
    API_TARGET_TYPES,
    UNRELEASED_TAG,
    CategoryInfo,
    Commit,
    Contributor,
    RenderOptions,
    Release,
    SecurityTestTarget,
    TableBlock,
    TargetType,
)

logger = get_logger(__name__)

COMMIT_FIX_REGEX = re.compile(r"(fix|close|resolve)(e?s|e?d)? [T#](\d+)", re.IGNORECASE)

# Header of the issue-body table listing security test targets ("type,target").
SECURITY_TARGET_HEADER = "種別,診断対象"
SECURITY_TARGET_TITLE = "脆弱診断対象"


class MarkdownRenderer:
    """Renders releases into a Markdown changelog.

    Usage:
        renderer = MarkdownRenderer(RenderOptions(categories=["Fixed"]))
        markdown = renderer.render_markdown(releases)
    """

    def __init__(self, options: RenderOptions) -> None:
        self.options = options

    def render_markdown(self, releases: Sequence[Release]) -> str:
        """Render every release and join the non-empty blocks.

        Args:
            releases: Releases in display order

        Returns:
            The document, or "" when no release has anything to show
        """
        logger.debug("render_started", releases_count=len(releases))

        blocks = []
        for release in releases:
            block = self.render_release(release)
            if block:
                blocks.append(block)
            else:
                logger.debug("release_skipped", release=release.name)

        output = "\n\n\n".join(blocks)

        logger.debug(
            "render_complete",
            releases_count=len(releases),
            rendered_count=len(blocks),
        )
        return f"{output}\n\n" if output else ""

    def render_release(self, release: Release) -> str:
        """Render one release block.

        Releases with no commits in any configured category render to ""
        so the caller can drop them.
        """
        categories = self.group_by_category(release.commits)
        categories_with_commits = [c for c in categories if c.commits]

        if not categories_with_commits:
            return ""

        if release.name == UNRELEASED_TAG:
            release_title = self.options.unreleased_name
        else:
            release_title = release.name

        markdown = f"## {release_title} ({release.date})"

        security_test_target = SecurityTestTarget()

        for category in categories_with_commits:
            markdown += f"\n\n#### {category.name}\n"

            security_test_target.extend(self.get_security_test_target(category.commits))

            markdown += self.render_contribution_list(category.commits)

        if not security_test_target.is_empty():
            markdown += f"\n\n{self.render_security_test_target_list(security_test_target)}"

        return markdown

    # -----------------------------------------------------------------------
    # Contributions
    # -----------------------------------------------------------------------

    def render_contributions_by_package(self, commits: Sequence[Commit]) -> str:
        """Render contributions grouped under their package names.

        Groups keep the order in which their first commit appears.
        """
        commits_by_package: dict[str, list[Commit]] = {}
        for commit in commits:
            package_name = self.render_package_names(commit.packages or [])
            commits_by_package.setdefault(package_name, []).append(commit)

        return "\n".join(
            f"* {package_name}\n{self.render_contribution_list(pkg_commits, '  ')}"
            for package_name, pkg_commits in commits_by_package.items()
        )

    @staticmethod
    def render_package_names(package_names: Sequence[str]) -> str:
        if not package_names:
            return "Other"
        return ", ".join(f"`{pkg}`" for pkg in package_names)

    def render_contribution_list(self, commits: Iterable[Commit], prefix: str = "") -> str:
        rendered = (self.render_contribution(commit) for commit in commits)
        return "\n".join(f"{prefix}* {line}" for line in rendered if line)

    def render_contribution(self, commit: Commit) -> str | None:
        """Render a commit's linked issue as a contribution line.

        Args:
            commit: The commit to render

        Returns:
            The line without the bullet, or None when the commit has no
            linked issue
        """
        issue = commit.github_issue
        if issue is None:
            return None

        markdown = ""

        pr_url = issue.pull_request.html_url if issue.pull_request else None
        if issue.number and pr_url:
            markdown += f"[#{issue.number}]({pr_url}) "

        markdown += (
            f"{self.rewrite_closing_reference(issue.title)} "
            f"([@{issue.user.login}]({issue.user.html_url}))"
        )
        return markdown

    def rewrite_closing_reference(self, title: str) -> str:
        """Link the first "fixes #N" style reference in a title.

        "fixes #42 and more" becomes "Closes [#42](<base_issue_url>42) and more".
        """
        base_issue_url = self.options.base_issue_url
        return COMMIT_FIX_REGEX.sub(
            lambda m: f"Closes [#{m.group(3)}]({base_issue_url}{m.group(3)})",
            title,
            count=1,
        )

    # -----------------------------------------------------------------------
    # Contributors
    # -----------------------------------------------------------------------

    def render_contributor_list(self, contributors: Sequence[Contributor]) -> str:
        rendered_contributors = sorted(
            f"- {self.render_contributor(contributor)}" for contributor in contributors
        )
        return f"#### Committers: {len(contributors)}\n" + "\n".join(rendered_contributors)

    @staticmethod
    def render_contributor(contributor: Contributor) -> str:
        user_name_and_link = f"[@{contributor.login}]({contributor.html_url})"
        if contributor.name:
            return f"{contributor.name} ({user_name_and_link})"
        return user_name_and_link

    # -----------------------------------------------------------------------
    # Security test targets
    # -----------------------------------------------------------------------

    @staticmethod
    def get_security_test_target(commits: Iterable[Commit]) -> SecurityTestTarget:
        """Collect URLs and API operations from security target tables.

        Only tables whose header is exactly the security target header are
        read. Rows with an empty target or an unknown type are skipped.
        Results keep commit order then row order, duplicates included.
        """
        target = SecurityTestTarget()

        for commit in commits:
            issue = commit.github_issue
            if issue is None or issue.parsed_body is None:
                continue

            for block in issue.parsed_body:
                if not isinstance(block, TableBlock):
                    continue
                if ",".join(block.header) != SECURITY_TARGET_HEADER:
                    continue

                for row in block.cells:
                    target_type = row[0] if len(row) > 0 else ""
                    name = row[1] if len(row) > 1 else ""
                    if not name:
                        continue
                    if target_type == TargetType.URL:
                        target.urls.append(name)
                    elif target_type in API_TARGET_TYPES:
                        target.apis.append(f"({target_type}) {name}")

        return target

    @staticmethod
    def render_security_test_target_list(security_test_target: SecurityTestTarget) -> str:
        markdown = f"#### {SECURITY_TARGET_TITLE}\n\n"

        if security_test_target.urls:
            rows = "".join(f"* {url}\n" for url in _unique_sorted(security_test_target.urls))
            markdown += f"##### URL\n{rows}\n"

        if security_test_target.apis:
            rows = "".join(f"* {api}\n" for api in _unique_sorted(security_test_target.apis))
            markdown += f"##### API\n{rows}\n"

        return markdown.strip()

    @staticmethod
    def has_packages(commits: Iterable[Commit]) -> bool:
        return any(commit.packages for commit in commits)

    def group_by_category(self, all_commits: Sequence[Commit]) -> list[CategoryInfo]:
        # A commit lands in every configured category it is tagged with.
        return [
            CategoryInfo(
                name=name,
                commits=[
                    commit
                    for commit in all_commits
                    if commit.categories and name in commit.categories
                ],
            )
            for name in self.options.categories
        ]


def _unique_sorted(values: Iterable[str]) -> list[str]:
    # First occurrence wins, then code-point order ("Ａ" U+FF21 sorts before "😀" U+1F600).
    return sorted(dict.fromkeys(values))
