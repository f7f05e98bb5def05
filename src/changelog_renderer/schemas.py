"""Pydantic models describing the data the changelog renderer consumes.

Releases, commits and issues arrive from the issue provider already shaped
like the GitHub REST payloads (and the camelCase keys the upstream changelog
tooling emits), so the models accept both the JSON aliases and the Python
field names.

Key design decisions:
- Every optional field has an explicit default, so accessors never have to
  guess what "absent" means
- Parsed issue bodies are a tagged union; only the table variant carries
  structure the renderer looks at
- Derived models (CategoryInfo, SecurityTestTarget) are built fresh per
  render call and never written back to the inputs
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag

UNRELEASED_TAG = "___unreleased___"


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class TargetType(StrEnum):
    """Row tags recognized in a security test target table.

    URL: A web endpoint to put through the security scan
    MUTATION / QUERY / SUBSCRIPTION: GraphQL operations
    """

    URL = "URL"
    MUTATION = "Mutation"
    QUERY = "Query"
    SUBSCRIPTION = "Subscription"


API_TARGET_TYPES = frozenset(
    t.value for t in (TargetType.MUTATION, TargetType.QUERY, TargetType.SUBSCRIPTION)
)


# ---------------------------------------------------------------------------
# Parsed issue body blocks
# ---------------------------------------------------------------------------


class TableBlock(BaseModel):
    """A table found in an issue body.

    Attributes:
        type: Always "table"
        header: Header cells, in column order
        cells: Data rows; each row is a list of cell strings
    """

    type: Literal["table"] = "table"
    header: list[str] = Field(default_factory=list, description="Header cells")
    cells: list[list[str]] = Field(default_factory=list, description="Data rows")


class MarkdownBlock(BaseModel):
    """Any other block of an issue body (paragraph, heading, list, ...)."""

    model_config = ConfigDict(extra="allow")

    type: str = Field("", description="Block tag from the body parser")
    text: str = Field("", description="Raw text of the block")


def _block_tag(value: Any) -> str:
    # Only an explicit "table" tag selects the table variant.
    if isinstance(value, dict):
        tag = value.get("type")
    else:
        tag = getattr(value, "type", None)
    return "table" if tag == "table" else "block"


ParsedBlock = Annotated[
    Union[
        Annotated[TableBlock, Tag("table")],
        Annotated[MarkdownBlock, Tag("block")],
    ],
    Discriminator(_block_tag),
]


# ---------------------------------------------------------------------------
# Input Schemas
# ---------------------------------------------------------------------------


class GitHubUser(BaseModel):
    """A GitHub account as returned by the users/issues endpoints."""

    login: str = Field(..., description="GitHub handle")
    html_url: str = Field(..., description="Profile URL")
    name: str | None = Field(None, description="Display name, if public")


class Contributor(GitHubUser):
    """A committer credited in a release."""


class PullRequestRef(BaseModel):
    """The pull_request stub GitHub attaches to issues that are PRs."""

    html_url: str | None = Field(None, description="PR page URL")


class Label(BaseModel):
    name: str
    color: str = ""


class Issue(BaseModel):
    """Issue or pull request linked to a commit.

    Attributes:
        number: Issue/PR number (absent for some synthetic entries)
        title: Issue title, rendered as the contribution text
        user: Author of the issue
        pull_request: Present when the issue is a pull request
        labels: GitHub labels on the issue
        body: Raw body text
        parsed_body: Blocks produced by the body parser
    """

    number: int | None = Field(None, description="Issue or PR number")
    title: str = Field("", description="Issue title")
    user: GitHubUser = Field(..., description="Issue author")
    pull_request: PullRequestRef | None = Field(
        None, description="Set when the issue is a pull request"
    )
    labels: list[Label] = Field(default_factory=list)
    body: str | None = Field(None, description="Raw issue body")
    parsed_body: list[ParsedBlock] | None = Field(
        None, description="Issue body split into blocks"
    )


class Commit(BaseModel):
    """A commit in a release, with its categorization.

    Attributes:
        commit_sha: Commit hash
        message: Commit message
        tags: Git tags pointing at this commit
        date: Commit date (YYYY-MM-DD)
        categories: Category names assigned upstream; None matches nothing
        packages: Packages touched by the commit (monorepos)
        github_issue: Linked issue/PR; commits without one are not rendered
    """

    model_config = ConfigDict(populate_by_name=True)

    commit_sha: str | None = Field(None, alias="commitSHA")
    message: str = ""
    tags: list[str] | None = None
    date: str | None = None
    categories: list[str] | None = Field(None, description="Assigned categories")
    packages: list[str] | None = Field(None, description="Changed packages")
    github_issue: Issue | None = Field(
        None, alias="githubIssue", description="Linked issue or PR"
    )


class Release(BaseModel):
    """A release to render.

    Attributes:
        name: Tag name, or UNRELEASED_TAG for not-yet-tagged commits
        date: Release date (YYYY-MM-DD)
        commits: Commits in the release, in order
        contributors: Committers credited in the release
    """

    name: str = Field(..., description="Release name or the unreleased sentinel")
    date: str = Field(..., description="Release date")
    commits: list[Commit] = Field(default_factory=list)
    contributors: list[Contributor] | None = None


class RenderOptions(BaseModel):
    """Renderer configuration.

    Attributes:
        categories: Category names, in section order
        base_issue_url: Prefix for rewritten "Closes #N" links
        unreleased_name: Heading used for the unreleased sentinel release
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    categories: list[str] = Field(default_factory=list)
    base_issue_url: str = Field("", alias="baseIssueUrl")
    unreleased_name: str = Field("Unreleased", alias="unreleasedName")


# ---------------------------------------------------------------------------
# Derived Schemas
# ---------------------------------------------------------------------------


class CategoryInfo(BaseModel):
    name: str
    commits: list[Commit] = Field(default_factory=list)


class SecurityTestTarget(BaseModel):
    """URLs and API operations collected for the security test appendix."""

    urls: list[str] = Field(default_factory=list)
    apis: list[str] = Field(default_factory=list)

    def extend(self, other: SecurityTestTarget) -> None:
        self.urls.extend(other.urls)
        self.apis.extend(other.apis)

    def is_empty(self) -> bool:
        return not self.urls and not self.apis
