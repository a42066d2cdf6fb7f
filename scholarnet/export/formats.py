"""
export formats - human-readable text and JSON.
"""

import json
from typing import Iterable, List

from ..core.config import OutputConfig, OutputFormat
from ..core.models import Paper


def papers_to_json(papers: Iterable[Paper], indent: int = 2) -> str:
    return json.dumps([p.to_dict() for p in papers], indent=indent, ensure_ascii=False)


def paper_to_json(paper: Paper, indent: int = 2) -> str:
    return json.dumps(paper.to_dict(), indent=indent, ensure_ascii=False)


def render_paper(paper: Paper, indent: int = 2, level: int = 0) -> str:
    """multi-line text block for a paper and, nested below, its citers."""
    pad = " " * (indent * level)
    inner = pad + " " * indent

    facts = []
    if paper.year is not None:
        facts.append(f"year: {paper.year}")
    if paper.citation_count is not None:
        facts.append(f"cited by: {paper.citation_count}")
    facts.append(f"cluster: {paper.cluster_id}")

    lines = [f"{pad}{paper.title}", f"{inner}{' | '.join(facts)}"]
    if paper.link:
        lines.append(f"{inner}link: {paper.link}")

    if paper.citers is not None:
        label = "cited by (partial)" if paper.citers_truncated else "cited by"
        if paper.citers:
            lines.append(f"{inner}{label}:")
            for citer in paper.citers:
                lines.append(render_paper(citer, indent, level + 2))
        else:
            lines.append(f"{inner}{label}: none")

    return "\n".join(lines)


def render(papers: List[Paper], config: OutputConfig, heading: str = "") -> str:
    """render papers in the configured format."""
    if config.format == OutputFormat.JSON:
        return papers_to_json(papers, config.indent)

    blocks = [render_paper(p, config.indent) for p in papers]
    if heading:
        blocks.insert(0, heading)
    return "\n\n".join(blocks)
