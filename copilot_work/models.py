"""Shared pydantic models: the contract between the CLI, dispatcher and clients."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict


class InputBatch(BaseModel):
    """Classified inputs: which tokens are repositories and which are issue bodies."""

    model_config = ConfigDict(frozen=True)

    repositories: list[str] = []  # owner/name
    work_items: list[str] = []  # issue bodies, may be multi-line markdown
    reclassified: bool = False  # False when the one-sided fallback kept the raw assignment


class WorkRequest(BaseModel):
    """Everything the start command collected from the command line."""

    model_config = ConfigDict(frozen=True)

    repos: list[str] = []  # --repo/-r
    work: list[str] = []  # --work/-w
    items: list[str] = []  # positional, order as given
    file_path: Path | None = None
    assign_copilot: bool = False
    show: bool = False


class PullRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    repository: str  # owner/name
    number: int
    title: str
    url: str
    state: str  # OPEN | CLOSED | MERGED
    author: str | None = None
    assignees: list[str] = []
    is_draft: bool = False
    updated_at: str
