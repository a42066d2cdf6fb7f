"""
result assembler - turns a finished crawl tree into immutable papers.
"""

from dataclasses import dataclass
from typing import List, Optional

from ..core.config import FailurePolicy
from ..core.errors import ScholarError
from ..core.models import Paper


@dataclass
class Branch:
    """
    one node of a crawl in progress.

    children stays None until this node's citation page was fetched;
    error is set when that fetch or its extraction failed.
    """
    paper: Paper
    remaining: int
    children: Optional[List["Branch"]] = None
    error: Optional[ScholarError] = None

    @property
    def needs_fetch(self) -> bool:
        return self.remaining > 0 and self.children is None and self.error is None

    def attach(self, citers: List[Paper]):
        self.children = [Branch(paper=c, remaining=self.remaining - 1) for c in citers]


def assemble(branch: Branch, policy: FailurePolicy = FailurePolicy.MARK) -> Paper:
    """
    build the paper for a branch, children in discovery order.
    failed children are left out; under MARK the parent records that.
    """
    if branch.children is None:
        return branch.paper

    kept = [child for child in branch.children if child.error is None]
    truncated = policy == FailurePolicy.MARK and len(kept) < len(branch.children)
    return branch.paper.with_citers(
        [assemble(child, policy) for child in kept],
        truncated=truncated
    )
