"""
Tests for the append-only audit ledger.
"""

import json
from pathlib import Path

from templater.core.models.receipt import OperationReceipt, RunSummary
from templater.core.persistence.audit import AuditEntry, AuditWriter


def _summary(**overrides) -> RunSummary:
    receipts = [
        OperationReceipt(generator="model", action="a", kind="template", destination="/p/a", status="created"),
        OperationReceipt(generator="model", action="b", kind="template", destination="/p/b", status="skipped"),
    ]
    fields = {"operation_id": "run-1", "generator": "model", "receipts": receipts, "invocations": ["model"]}
    fields.update(overrides)
    return RunSummary(**fields)


class TestAuditEntry:
    def test_from_summary(self):
        entry = AuditEntry.from_summary(_summary(), "/p")
        assert entry.status == "ok"
        assert entry.operations_total == 2
        assert entry.operations_applied == 1
        assert entry.operations_skipped == 1
        assert entry.operations_written == 1
        assert entry.destination_root == "/p"
        assert entry.timestamp

    def test_aborted_summary(self):
        receipt = OperationReceipt(generator="m", action="x", kind="file", destination="/p/x", status="aborted")
        summary = _summary(receipts=[receipt], aborted=True, aborted_at=receipt, error="boom")
        entry = AuditEntry.from_summary(summary)
        assert entry.status == "aborted"
        assert entry.aborted_at == "/p/x"
        assert entry.error == "boom"

    def test_dry_run_writes_nothing(self):
        entry = AuditEntry.from_summary(_summary(dry_run=True))
        assert entry.dry_run
        assert entry.operations_written == 0


class TestAuditWriter:
    def test_appends_lines(self, tmp_path: Path):
        writer = AuditWriter(tmp_path / "nested" / "audit.ndjson")
        writer.write(AuditEntry(operation_id="one"))
        writer.write(AuditEntry(operation_id="two"))
        lines = writer.path.read_text().splitlines()
        assert [json.loads(line)["operation_id"] for line in lines] == ["one", "two"]

    def test_read_missing_file(self, tmp_path: Path):
        assert AuditWriter(tmp_path / "none.ndjson").read_all() == []

    def test_skips_corrupt_lines(self, tmp_path: Path):
        path = tmp_path / "audit.ndjson"
        writer = AuditWriter(path)
        writer.write(AuditEntry(operation_id="good"))
        with path.open("a") as f:
            f.write("{not json\n\n")
        writer.write(AuditEntry(operation_id="also-good"))
        assert [e.operation_id for e in writer.read_all()] == ["good", "also-good"]

    def test_read_recent(self, tmp_path: Path):
        writer = AuditWriter(tmp_path / "audit.ndjson")
        for i in range(5):
            writer.write(AuditEntry(operation_id=str(i)))
        assert [e.operation_id for e in writer.read_recent(2)] == ["3", "4"]

    def test_write_failure_is_logged(self, tmp_path: Path, caplog):
        blocker = tmp_path / "file"
        blocker.write_text("")
        writer = AuditWriter(blocker / "audit.ndjson")
        writer.write(AuditEntry(operation_id="x"))
        assert "Failed to write audit entry" in caplog.text
