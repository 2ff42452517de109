"""Split a pool of raw tokens into repository identifiers and issue bodies."""

import re
from collections.abc import Iterable

from copilot_work.models import InputBatch

REPO_PATTERN = re.compile(r"^[^/]+/[^/]+$")


def is_repo_format(value: str) -> bool:
    """True for `owner/name`: exactly one slash with non-empty sides."""
    return REPO_PATTERN.match(value) is not None


def _distinct(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(values))


def classify_inputs(
    explicit_repos: Iterable[str] = (),
    explicit_work: Iterable[str] = (),
    positional: Iterable[str] = (),
) -> InputBatch:
    """Partition explicit and positional tokens into repositories and work items.

    Positional tokens are ambiguous, so each one starts out as both a
    repository candidate and a work-item candidate. Every distinct candidate is
    then sorted by `is_repo_format`, regardless of which flag it came from.

    One-sided fallback: when that partition would leave one side empty while
    the other is not, it is discarded and the raw candidate lists are returned
    unchanged. A lone `not-a-repo` therefore stays a repository candidate (and
    fails format validation) instead of silently becoming an issue body.

    Only the reclassified result is de-duplicated. The fallback keeps the raw
    lists, so `-w x -w x` yields two work items while `-w x -w x -r a/b`
    yields one.
    """
    explicit_repos = [r for r in explicit_repos if r]
    explicit_work = [w for w in explicit_work if w]
    positional = [p for p in positional if p]
    repo_candidates = explicit_repos + positional
    work_candidates = explicit_work + positional

    pool = _distinct(explicit_repos + explicit_work + positional)
    repositories = [item for item in pool if is_repo_format(item)]
    work_items = [item for item in pool if not is_repo_format(item)]

    if not repositories or not work_items:
        return InputBatch(repositories=repo_candidates, work_items=work_candidates, reclassified=False)

    return InputBatch(repositories=repositories, work_items=work_items, reclassified=True)
