"""Program metadata audit.

Checks every program file's raw front matter against its placement
(``<vertical>/<country>/<program>.mdx``). Missing or disagreeing
``vertical``/``country``/``program`` keys and absent numeric facts are
reported; the loader itself always trusts the path.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict, dataclass, field
import logging
from pathlib import Path

from content_hub.content.loader import discover_files
from content_hub.content.normalize import coerce_number, coerce_string
from content_hub.utils.front_matter import FrontMatterError, parse_front_matter
from content_hub.utils.path_builder import resolve_route


logger = logging.getLogger(__name__)

PLACEMENT_KEYS: tuple[str, ...] = ("vertical", "country", "program")
NUMERIC_FACTS: dict[str, tuple[str, ...]] = {
    "min_investment": ("minInvestment", "min_investment"),
    "timeline_months": ("timelineMonths", "timeline_months"),
}


@dataclass(slots=True)
class ProgramAuditReport:
    """Findings for a single program file."""

    path: str
    url: str
    title: str | None = None
    missing: list[str] = field(default_factory=list)
    mismatched: dict[str, str] = field(default_factory=dict)
    missing_facts: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return not (self.missing or self.mismatched or self.missing_facts or self.error)

    def to_dict(self) -> dict[str, object]:
        payload = asdict(self)
        payload["status"] = "ok" if self.ok else "bad"
        return payload


def audit_program_file(root: Path, path: Path) -> ProgramAuditReport | None:
    """Audit one file; None when it is not a program."""
    route = resolve_route(root, path)
    if route is None or route.doc_type != "program":
        return None

    report = ProgramAuditReport(path=path.relative_to(root).as_posix(), url=route.url)
    try:
        raw, _body = parse_front_matter(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, FrontMatterError) as exc:
        report.error = str(exc)
        return report

    report.title = coerce_string(raw.get("title"))
    expected = {
        "vertical": route.vertical.value if route.vertical else "",
        "country": route.country or "",
        "program": route.program or "",
    }
    for key in PLACEMENT_KEYS:
        value = coerce_string(raw.get(key))
        if value is None:
            report.missing.append(key)
        elif value.lower() != expected[key].lower():
            report.mismatched[key] = value

    for name, aliases in NUMERIC_FACTS.items():
        if all(coerce_number(raw.get(alias)) is None for alias in aliases):
            report.missing_facts.append(name)
    return report


def audit_programs(root: Path) -> list[ProgramAuditReport]:
    """Audit every program file below ``root`` in path order."""
    reports: list[ProgramAuditReport] = []
    for path in discover_files(root):
        report = audit_program_file(root, path)
        if report is not None:
            reports.append(report)
    bad = sum(1 for report in reports if not report.ok)
    logger.info("Audited %d program files, %d with problems", len(reports), bad)
    return reports


def format_report(report: ProgramAuditReport) -> str:
    parts = [f"{report.path:<48} status={'ok' if report.ok else 'bad'}"]
    if report.missing:
        parts.append(f"missing={','.join(report.missing)}")
    if report.mismatched:
        parts.append("mismatched=" + ",".join(f"{k}:{v}" for k, v in report.mismatched.items()))
    if report.missing_facts:
        parts.append(f"facts={','.join(report.missing_facts)}")
    if report.error:
        parts.append(f"error={report.error}")
    return " ".join(parts)


def determine_exit_code(reports: Sequence[ProgramAuditReport]) -> int:
    return 0 if all(report.ok for report in reports) else 1
