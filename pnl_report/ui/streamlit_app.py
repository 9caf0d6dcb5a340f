"""
Streamlit view of the profit and loss report served by the FastAPI service.
"""

from __future__ import annotations

from typing import List

import streamlit as st

from pnl_report.client import ReportClient
from pnl_report.config import get_settings
from pnl_report.logging_utils import setup_logging
from pnl_report.report.formatting import Tone
from pnl_report.report.models import ReportDocument
from pnl_report.report.renderer import DisplayCell, DisplayRow, RowKind
from pnl_report.session import CommentarySession, ReportSession, RequestStatus

_TONE_COLORS = {
    Tone.FAVORABLE: "green",
    Tone.UNFAVORABLE: "red",
    Tone.NEUTRAL: "gray",
}


def main() -> None:
    settings = get_settings()
    setup_logging(settings.log_level)
    st.set_page_config(page_title="Profit and Loss", layout="wide")

    if "report_session" not in st.session_state:
        client = ReportClient(settings.api_url)
        st.session_state.report_session = ReportSession(client=client, strict_values=settings.strict_values)
        st.session_state.commentary = CommentarySession(client=client)

    session: ReportSession = st.session_state.report_session
    if session.status is RequestStatus.IDLE:
        with st.spinner("Loading report..."):
            session.load()

    if session.status is RequestStatus.ERROR:
        st.error(session.error or "Failed to load the report.")
        if st.button("Retry"):
            with st.spinner("Loading report..."):
                session.retry()
            st.rerun()
        return

    document = session.document
    _render_header(document)
    _render_toolbar(session)
    view = st.radio("View", ("Tree", "Flat table"), horizontal=True, key="report_view")
    if view == "Tree":
        _render_table(document, session.rows())
    else:
        st.dataframe(session.frame(), hide_index=True)
    _render_commentary(st.session_state.commentary, document)
    _render_diagnostics(session)


def _render_header(document: ReportDocument) -> None:
    company = document.company
    st.title(company.name)
    details = [part for part in (company.report_type, company.basis, company.period) if part]
    st.caption(" • ".join(details))
    if company.actuals_to:
        st.caption(f"Actuals to {company.actuals_to}")


def _render_toolbar(session: ReportSession) -> None:
    expand_col, collapse_col, csv_col, json_col = st.columns(4)
    expand_col.button("Expand all", on_click=session.expand_all)
    collapse_col.button("Collapse all", on_click=session.collapse_all)
    csv_file = session.csv_file()
    csv_col.download_button(
        "Export CSV",
        data=csv_file.data,
        file_name=csv_file.filename,
        mime=csv_file.mime_type,
    )
    json_file = session.json_file()
    json_col.download_button(
        "Export JSON",
        data=json_file.data,
        file_name=json_file.filename,
        mime=json_file.mime_type,
    )


def _render_table(document: ReportDocument, rows: List[DisplayRow]) -> None:
    widths = [3] + [1] * len(document.columns)
    header = st.columns(widths)
    header[0].markdown("**Account**")
    for slot, column in zip(header[1:], document.columns):
        slot.markdown(f"**{column.label}**  \n:gray[{column.kind}]")

    session: ReportSession = st.session_state.report_session
    for index, row in enumerate(rows):
        slots = st.columns(widths)
        _render_label(slots[0], row, session, index)
        for slot, cell in zip(slots[1:], row.cells):
            slot.markdown(_cell_markdown(cell, bold=row.kind is not RowKind.LINE_ITEM))


def _render_label(slot, row: DisplayRow, session: ReportSession, index: int) -> None:
    indent = "\u00a0" * 4 * max(row.depth - 1, 0)
    if row.section_id and session.diagnostics.for_section(row.section_id):
        indent += "\u26a0 "
    if row.kind is RowKind.SECTION and row.collapsible:
        marker = "▾" if row.expanded else "▸"
        slot.button(
            f"{indent}{marker} {row.label}",
            key=f"toggle-{row.key}-{index}",
            on_click=session.toggle,
            args=(row.section_id,),
        )
        return
    text = _escape(row.label)
    if row.kind in (RowKind.SECTION, RowKind.GROSS_PROFIT, RowKind.SUMMARY):
        text = f"**{text}**"
    slot.markdown(f"{indent}{text}")


def _cell_markdown(cell: DisplayCell, *, bold: bool = False) -> str:
    if not cell.text:
        return ""
    text = _escape(cell.text)
    if bold:
        text = f"**{text}**"
    markdown = f":{_TONE_COLORS[cell.tone]}[{text}]"
    if cell.trend is not None and cell.trend.as_text():
        markdown += f" :{_TONE_COLORS[cell.trend.tone]}[{cell.trend.as_text()}]"
    return markdown


def _escape(text: str) -> str:
    return text.replace("$", "\\$")


def _render_commentary(commentary: CommentarySession, document: ReportDocument) -> None:
    st.divider()
    st.subheader("AI commentary")
    prompt = st.text_area("Ask about this report", key="commentary_prompt")
    if st.button("Generate commentary", disabled=commentary.loading):
        with st.spinner("Generating commentary..."):
            commentary.submit(prompt, document)

    if commentary.status is RequestStatus.ERROR and commentary.error:
        st.error(commentary.error)
    elif commentary.response:
        st.write(commentary.response)


def _render_diagnostics(session: ReportSession) -> None:
    lines = session.diagnostics.as_text_lines()
    title = f"Diagnostics ({session.diagnostics.warning_count} warnings)" if lines else "Diagnostics"
    with st.expander(title, expanded=False):
        if lines:
            st.code("\n".join(lines))
        else:
            st.info("No diagnostics recorded for this session.")


if __name__ == "__main__":
    main()
