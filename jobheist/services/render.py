from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from typing import Any, Literal

from jobheist.schemas.score import Score

RenderFormat = Literal["json", "xml", "markdown"]

NO_STRONG_MATCHES = "No strong keyword matches identified"
NO_UNDER_REPRESENTED = "All present keywords are well-represented"
NO_MISSING_KEYWORDS = "No critical keywords missing"
NO_SUGGESTIONS = "No specific changes suggested"

VERDICT_EXCELLENT = "✅ **Excellent match** - Your resume strongly aligns with requirements"
VERDICT_GOOD = "👍 **Good match** - Solid foundation with room for optimization"
VERDICT_MODERATE = "📝 **Moderate match** - Consider the suggestions above to strengthen alignment"
VERDICT_LIMITED = "⚠️ **Limited match** - Significant improvements recommended before applying"


def _num(value: int | float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def verdict(score: int | float) -> str:
    if score >= 80:
        return VERDICT_EXCELLENT
    if score >= 65:
        return VERDICT_GOOD
    if score >= 50:
        return VERDICT_MODERATE
    return VERDICT_LIMITED


def render_json(score: Score) -> str:
    return json.dumps(score.to_payload(), indent=2, ensure_ascii=False)


def _xml_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _num(value)
    return str(value)


def _append_xml(parent: ET.Element, tag: str, value: Any) -> None:
    if isinstance(value, list):
        # Lists become repeated sibling elements named after the field.
        if not value:
            ET.SubElement(parent, tag)
            return
        for item in value:
            _append_xml(parent, tag, item)
        return
    child = ET.SubElement(parent, tag)
    if isinstance(value, dict):
        for key, item in value.items():
            _append_xml(child, key, item)
        return
    child.text = _xml_text(value)


def render_xml(score: Score) -> str:
    root = ET.Element("evaluation")
    for key, value in score.to_payload().items():
        _append_xml(root, key, value)
    ET.indent(root, space="  ")
    body = ET.tostring(root, encoding="unicode")
    return f'<?xml version="1.0" encoding="UTF-8"?>\n{body}'


def _keyword_section(score: Score) -> str:
    keywords = score.keyword_analysis

    if keywords.strong_matches:
        strong = "\n".join(
            f"**{k.keyword}** - You: {k.resume_frequency}x | Job: {k.job_frequency}x"
            for k in keywords.strong_matches
        )
    else:
        strong = NO_STRONG_MATCHES

    if keywords.under_represented:
        under = "\n\n".join(
            f"**{k.keyword}** - You: {k.resume_frequency}x | Job: {k.job_frequency}x\n→ Consider: {k.suggestion}"
            for k in keywords.under_represented
        )
    else:
        under = NO_UNDER_REPRESENTED

    if keywords.not_found:
        missing = "\n\n".join(
            f"**{k.keyword}** - Job mentions: {k.job_frequency}x\n→ Consider: {k.suggestion}"
            for k in keywords.not_found
        )
    else:
        missing = NO_MISSING_KEYWORDS

    return (
        "## Keyword Analysis\n\n"
        f"### ✅ Strong Matches\n{strong}\n\n"
        f"### ⚠️ Under-represented Keywords\n{under}\n\n"
        f"### ❌ Keywords Not Found\n{missing}"
    )


def _suggestion_section(score: Score) -> str:
    if not score.suggestions:
        return f"## Optimization Opportunities\n\n{NO_SUGGESTIONS}"
    blocks: list[str] = []
    for index, s in enumerate(score.suggestions, start=1):
        lines = [
            f"### Suggestion #{index}: {s.type.capitalize()} {s.location}",
            f'**Current:** "{s.current}"' if s.current else "",
            f'**Consider:** "{s.suggested}"',
            f"**Potential Impact:** +{_num(s.impact)} points",
            f"**Rationale:** {s.rationale}",
        ]
        blocks.append("\n".join(line for line in lines if line))
    return "## Optimization Opportunities\n\n" + "\n\n".join(blocks)


def _bullets(items: list[str], marker: str = "-") -> str:
    return "\n".join(f"{marker} {item}" for item in items)


def render_markdown(score: Score) -> str:
    analysis = score.analysis
    compatibility = analysis.compatibility
    improvement = compatibility.potential - compatibility.current
    sections = [
        f"# ATS Compatibility Report: {_num(score.score)}/100",
        _keyword_section(score),
        _suggestion_section(score),
        (
            "## Role Analysis\n\n"
            f"### Top Priorities\n{_bullets(analysis.top_priorities)}\n\n"
            f"### Your Strengths\n{_bullets(analysis.current_strengths)}\n\n"
            f"### Opportunities\n{_bullets(analysis.opportunities)}"
        ),
        f"## Quick Optimizations\n{_bullets(score.optimizations, marker='→')}",
        (
            "## Compatibility Assessment\n"
            f"**Current Match:** {_num(compatibility.current)}%\n"
            f"**Potential Match:** {_num(compatibility.potential)}%\n"
            f"**Possible Improvement:** +{_num(improvement)}%\n\n"
            f"{verdict(score.score)}"
        ),
    ]
    return "\n\n".join(sections)


def render(score: Score, fmt: RenderFormat = "json") -> str:
    if fmt == "xml":
        return render_xml(score)
    if fmt == "markdown":
        return render_markdown(score)
    return render_json(score)
