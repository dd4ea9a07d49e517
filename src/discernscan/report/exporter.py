"""
Handles exporting DISCERN results to CSV and a plain-text report.
"""

from __future__ import annotations

import csv
import io
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, List, Sequence, Type

import structlog

from discernscan.criteria import CRITERION_IDS, DISCERN_CRITERIA
from discernscan.protocols import AnalysisFailure, DiscernResult

from .aggregator import quality_label, summarize

logger = structlog.get_logger(__name__)


class BaseExporter(ABC):
    """Abstract base class for result exporters."""

    @abstractmethod
    def render(self, results: Sequence[DiscernResult], failures: Sequence[AnalysisFailure] = ()) -> str:
        """Render the results as text."""

    def export(
        self,
        results: Iterable[DiscernResult],
        output_path: Path,
        failures: Sequence[AnalysisFailure] = (),
    ) -> None:
        """Writes the rendered results to ``output_path``."""
        rendered = self.render(list(results), failures)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Exporting results", exporter=type(self).__name__, path=str(output_path))
        with open(output_path, "w", encoding="utf-8", newline="") as f:
            f.write(rendered)


class CsvExporter(BaseExporter):
    """One row per result with per-criterion score and justification columns."""

    @staticmethod
    def header() -> List[str]:
        columns = ["url", "title", "type", "totalScore", "qualityLabel", "observations"]
        for criteria_id in sorted(CRITERION_IDS):
            columns += [f"c{criteria_id}_score", f"c{criteria_id}_justification"]
        return columns

    @staticmethod
    def row(result: DiscernResult) -> List[str]:
        data = result.to_dict()
        values = [
            data["url"],
            data["title"],
            data["type"],
            str(data["totalScore"]),
            quality_label(result.total_score),
            data["observations"],
        ]
        by_id = {item["criteriaId"]: item for item in data["scores"]}
        for criteria_id in sorted(CRITERION_IDS):
            item = by_id.get(criteria_id)
            values += [str(item["score"]), item["justification"]] if item else ["", ""]
        return values

    def render(self, results: Sequence[DiscernResult], failures: Sequence[AnalysisFailure] = ()) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
        writer.writerow(self.header())
        for result in results:
            writer.writerow(self.row(result))
        return buffer.getvalue()


class TextReportExporter(BaseExporter):
    """Human-readable report: totals, labels, category percentages and justifications."""

    def render(self, results: Sequence[DiscernResult], failures: Sequence[AnalysisFailure] = ()) -> str:
        lines: List[str] = ["DISCERN ANALYSIS REPORT", "=" * 23, ""]
        lines.append(f"Analyzed URLs: {len(results)}")
        if failures:
            lines.append(f"Rejected URLs: {len(failures)}")
        lines.append("")

        for position, result in enumerate(results, start=1):
            summary = summarize(result)
            lines.append(f"{position}. {result.title}")
            lines.append(f"   URL: {result.url}")
            lines.append(f"   Type: {result.type}")
            lines.append(f"   Total score: {result.total_score}/75 ({summary['qualityLabel']})")
            categories = summary["categories"]
            lines.append(
                "   Reliability: {reliability}%  Quality: {quality}%  Treatment: {treatment}%".format(**categories)
            )
            for criterion in DISCERN_CRITERIA:
                item = result.score_for(criterion.id)
                if item is None:
                    continue
                lines.append(f"   [{criterion.id:>2}] {criterion.question} {item.score}/5")
                lines.append(f"        {item.justification}")
            if result.observations:
                lines.append(f"   Observations: {result.observations}")
            lines.append("")

        if failures:
            lines.append("REJECTED URLS")
            lines.append("-" * 13)
            for failure in failures:
                lines.append(f"- {failure.url} [{failure.stage.value}] {failure.error_kind}: {failure.message}")
            lines.append("")

        return "\n".join(lines)


EXPORTERS: Dict[str, Type[BaseExporter]] = {
    "csv": CsvExporter,
    "text": TextReportExporter,
}


def get_exporter(format_name: str) -> BaseExporter:
    try:
        return EXPORTERS[format_name.lower()]()
    except KeyError:
        raise ValueError(f"Unknown export format {format_name!r}; expected one of {sorted(EXPORTERS)}") from None
