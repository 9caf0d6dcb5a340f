"""
LLM-backed commentary over one report document, with a deterministic narrative when no model is configured.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from pnl_report.config import get_settings
from pnl_report.prompts.commentary_prompt import COMMENTARY_SYSTEM_PROMPT
from pnl_report.report.aggregator import has_stated_value, pct_change, resolve_category, section_values
from pnl_report.report.errors import ErrorType, ReportError
from pnl_report.report.formatting import format_currency
from pnl_report.report.models import ReportDocument

logger = logging.getLogger(__name__)


def build_report_digest(document: ReportDocument) -> Dict[str, Any]:
    """
    Compact structured context for the model: company, columns, top-level section figures, summary.
    """

    width = len(document.columns)
    sections: List[Dict[str, Any]] = []
    for section in document.sections:
        sections.append(
            {
                "id": section.id,
                "name": section.name,
                "category": resolve_category(section).value,
                "values": section_values(section, width),
                "reconstructed": not has_stated_value(section),
            }
        )
    return {
        "company": document.company.model_dump(),
        "columns": [{"label": column.label, "kind": column.kind} for column in document.columns],
        "sections": sections,
        "summary": [{"name": item.name, "values": list(item.values)} for item in document.summary],
    }


def _largest_movement(document: ReportDocument) -> Optional[str]:
    if not document.summary or len(document.columns) < 3:
        return None
    headline = document.summary[-1]
    best: Optional[tuple[float, int]] = None
    # last column is the period total, so compare periods only
    for index in range(1, len(document.columns) - 1):
        change = pct_change(headline.values[index], headline.values[index - 1])
        if best is None or abs(change) > abs(best[0]):
            best = (change, index)
    if best is None or best[0] == 0:
        return None
    change, index = best
    previous = document.columns[index - 1]
    current = document.columns[index]
    verb = "rose" if change > 0 else "fell"
    return (
        f"{headline.name} {verb} {abs(change):.1f}% from {previous.label} to {current.label} "
        f"({current.kind})."
    )


def summarize_report_text(document: ReportDocument, prompt: Optional[str] = None) -> str:
    """
    Deterministic commentary built only from the document's own figures.
    """

    if not document.columns:
        return f"{document.company.name}: the report has no periods to comment on."

    last = len(document.columns) - 1
    total_label = document.columns[last].label
    lines: List[str] = [
        f"{document.company.name} {document.company.report_type or 'report'} for {document.company.period or total_label}."
    ]
    if document.summary:
        headline = document.summary[-1]
        lines.append(f"{headline.name} ({total_label}): {format_currency(headline.values[last])}.")

    reconstructed: List[str] = []
    for section in document.sections:
        values = section_values(section, len(document.columns))
        lines.append(f"{section.name} ({total_label}): {format_currency(values[last])}.")
        if not has_stated_value(section):
            reconstructed.append(section.name)

    movement = _largest_movement(document)
    if movement:
        lines.append(movement)
    if reconstructed:
        lines.append(f"Totals for {', '.join(reconstructed)} are summed from their line items.")
    if prompt:
        lines.append("Detailed commentary requires a configured language model; figures above come from the report.")
    return "\n".join(lines)


class CommentaryService:
    """
    Answers free-text prompts about a report, through the chat model when one is configured.
    """

    def __init__(self, model_name: Optional[str] = None, enable_llm: Optional[bool] = None, llm: Any = None) -> None:
        self._llm = llm
        if self._llm is not None:
            return
        settings = get_settings()
        use_llm = enable_llm if enable_llm is not None else settings.llm_enabled
        if use_llm:
            model = model_name or settings.commentary_model
            try:  # pragma: no cover - network interaction
                self._llm = ChatOpenAI(model=model, temperature=0.2)
                logger.info("CommentaryService initialized LLM model %s", model)
            except Exception as exc:  # pragma: no cover - optional path
                logger.warning("CommentaryService failed to initialize ChatOpenAI (%s). Using report summary.", exc)
                self._llm = None

    @property
    def uses_llm(self) -> bool:
        return self._llm is not None

    def generate(self, prompt: str, document: ReportDocument) -> str:
        text = prompt.strip()
        if not text:
            raise ValueError("Prompt must not be empty.")
        if self._llm is None:
            logger.info("CommentaryService answering from report summary (no LLM configured)")
            return summarize_report_text(document, text)
        return self._invoke_llm(text, document)

    def _invoke_llm(self, prompt: str, document: ReportDocument) -> str:
        digest = json.dumps(build_report_digest(document), indent=2)
        messages = [
            SystemMessage(content=COMMENTARY_SYSTEM_PROMPT),
            HumanMessage(content=f"Report digest:\n```json\n{digest}\n```\n\nRequest: {prompt}"),
        ]
        try:
            response = self._llm.invoke(messages)
        except Exception as exc:
            logger.warning("CommentaryService LLM call failed (%s)", exc)
            raise ReportError(
                ErrorType.COMMENTARY_FAILURE,
                "Commentary could not be generated. Please try again.",
                {"reason": str(exc)},
            ) from exc

        content = getattr(response, "content", "")
        if isinstance(content, list):
            content = " ".join(part.get("text", "") for part in content if isinstance(part, dict))
        content = str(content).strip()
        if not content:
            raise ReportError(ErrorType.COMMENTARY_FAILURE, "The commentary service returned an empty answer.")
        return content


__all__ = ["CommentaryService", "build_report_digest", "summarize_report_text"]
