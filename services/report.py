# services/report.py
from datetime import datetime
from typing import List, Optional

from schemas import AnalysisResult

REPORT_TITLE = "Moments Analysis Report"


def report_filename(now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    return f"moments-report-{now.strftime('%Y-%m-%d-%H-%M-%S')}.md"


def _bullets(lines: List[str], items: List[str], indent: str = "") -> None:
    for item in items:
        lines.append(f"{indent}- {item}")


def build_report_markdown(
    result: Optional[AnalysisResult],
    raw_text: Optional[str],
    generated_at: Optional[datetime] = None,
) -> str:
    """Markdown export of whatever sections are present. Nothing here touches the network."""
    generated_at = generated_at or datetime.now()
    lines: List[str] = [f"# {REPORT_TITLE}", "", f"- Generated: {generated_at:%Y-%m-%d %H:%M:%S}", ""]
    r = result or AnalysisResult()

    if r.personality:
        lines.append("## Personality")
        if r.personality.tags:
            lines.append(f"- Tags: {', '.join(r.personality.tags)}")
        if r.personality.description:
            lines += ["", r.personality.description]
        lines.append("")

    if r.interests:
        lines.append("## Interests")
        for it in r.interests:
            lines.append(f"- **{it.name}** ({it.level})")
            if it.description:
                lines.append(f"  - {it.description}")
        lines.append("")

    if r.lifestyle:
        lines.append("## Lifestyle")
        if r.lifestyle.habits:
            lines.append(f"- Habits: {', '.join(r.lifestyle.habits)}")
        if r.lifestyle.description:
            lines += ["", r.lifestyle.description]
        lines.append("")

    if r.values:
        lines.append("## Values")
        for label, value in (
            ("Career", r.values.career),
            ("Relationships", r.values.relationship),
            ("Family", r.values.family),
            ("Life", r.values.life),
        ):
            if value:
                lines.append(f"- {label}: {value}")
        lines.append("")

    if r.emotion:
        lines.append("## Emotional State")
        if r.emotion.state:
            lines.append(f"- State: {r.emotion.state}")
        if r.emotion.description:
            lines += ["", r.emotion.description]
        lines.append("")

    s = r.suggestions
    if s:
        lines.append("## Suggestions")
        if s.topics:
            lines.append("### Conversation Topics")
            _bullets(lines, s.topics)
            lines.append("")
        if s.openings:
            lines.append("### Opening Lines")
            _bullets(lines, s.openings)
            lines.append("")
        if s.dating and (s.dating.places or s.dating.activities):
            lines.append("### Date Ideas")
            if s.dating.places:
                lines.append("- Places")
                _bullets(lines, s.dating.places, indent="  ")
            if s.dating.activities:
                lines.append("- Activities")
                _bullets(lines, s.dating.activities, indent="  ")
            lines.append("")
        if s.warnings:
            lines.append("### Watch Out For")
            _bullets(lines, s.warnings)
            lines.append("")
        if s.strategy:
            lines.append("### Strategy")
            _bullets(lines, s.strategy)
            lines.append("")

    if raw_text:
        lines += ["## Raw Analysis", "", raw_text, ""]

    return "\n".join(lines).strip()
