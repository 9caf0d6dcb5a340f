from pnl_report.logging_utils import DiagnosticsLog


def test_diagnostics_log_promotes_section_id_and_merges_context():
    log = DiagnosticsLog("tests.diagnostics", context={"session": "unit"})

    log.warning("Missing value coerced to zero", section_id="operating_expenses", column_index=2)

    entries = log.as_entries()
    assert len(entries) == 1
    entry = entries[0]
    assert entry.level == "WARNING"
    assert entry.section_id == "operating_expenses"
    assert entry.metadata == {"session": "unit", "column_index": 2}
    assert "section_id" not in entry.metadata
    assert "section=operating_expenses" in entry.as_text()


def test_diagnostics_log_without_metadata():
    log = DiagnosticsLog("tests.diagnostics")
    log.info("Report loaded")
    assert log.as_entries()[0].metadata is None
    assert log.as_text_lines()[0].endswith("[INFO] Report loaded")
    log.clear()
    assert len(log) == 0


def test_repeated_entries_are_recorded_once():
    log = DiagnosticsLog("tests.diagnostics")
    for _ in range(3):
        log.warning("Missing value coerced to zero", section_id="premises", column_index=1)
    log.warning("Missing value coerced to zero", section_id="premises", column_index=2)
    log.info("Report loaded")

    assert len(log) == 3
    assert log.warning_count == 2
    assert [entry.metadata["column_index"] for entry in log.for_section("premises")] == [1, 2]
    assert log.for_section("income") == []
