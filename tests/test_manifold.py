"""
Tests for the Manifold — dependency-ordered runs, abort unwinding,
idempotence, and audit entries.
"""

import logging
from pathlib import Path

import pytest

from templater.adapters.mock import MemoryStore, ScriptedPrompt
from templater.core.engine.generator import Generator
from templater.core.engine.manifold import Manifold, generate_operation_id
from templater.core.errors import GeneratorError, TemplaterError, TooFewArgumentsError
from templater.core.models.action import Action
from templater.core.models.argument import ArgumentSpec
from templater.core.models.decision import ConflictDecision
from templater.core.persistence.audit import AuditWriter

DEST = Path("/project")


def _write(destination: str, text: str = "") -> Action:
    return Action.template(None, destination, inline=text or f"{destination}\n")


def _manifold(store: MemoryStore, prompt: ScriptedPrompt, **generators: list[Action]) -> Manifold:
    manifold = Manifold(DEST, prompt, store=store)
    for name, actions in generators.items():
        manifold.register(name, Generator(name, actions=actions))
    return manifold


def _order(summary) -> list[str]:
    return [Path(r.destination).name for r in summary.receipts]


# ── Single generator scenarios ───────────────────────────────────────


class TestModelScenario:
    @pytest.fixture
    def manifold(self, store: MemoryStore, prompt: ScriptedPrompt, source_root: Path) -> Manifold:
        manifold = Manifold(DEST, prompt, store=store)
        manifold.register("model", Generator(
            "model",
            arguments=[ArgumentSpec(name="name")],
            actions=[Action.template("model.rb.erb", "app/models/{name}.rb")],
            source_root=source_root,
        ))
        return manifold

    def test_first_run_creates_without_prompt(self, manifold, store, prompt):
        summary = manifold.invoke("model", ["widget"])
        [receipt] = summary.receipts
        assert receipt.status == "created"
        assert store.writes == [(DEST / "app/models/widget.rb", b"class Widget < ActiveRecord::Base\nend\n")]
        assert prompt.call_count == 0
        assert summary.status == "ok"

    def test_manual_edit_survives_skip(self, manifold, store, prompt):
        target = DEST / "app/models/widget.rb"
        manifold.invoke("model", ["widget"])
        store.seed(target, "class Widget < Custom\nend\n")

        prompt.push(ConflictDecision.skip())
        summary = manifold.invoke("model", ["widget"])

        assert prompt.call_count == 1
        [(path, diff_text)] = prompt.asked
        assert path == target
        assert "- class Widget < Custom" in diff_text
        assert "+ class Widget < ActiveRecord::Base" in diff_text
        assert store.text(target) == "class Widget < Custom\nend\n"
        assert [r.status for r in summary.receipts] == ["skipped"]

    def test_second_run_is_idempotent(self, manifold, store, prompt):
        manifold.invoke("model", ["widget"])
        writes_after_first = len(store.writes)

        summary = manifold.invoke("model", ["widget"])
        assert len(store.writes) == writes_after_first
        assert prompt.call_count == 0
        assert [r.status for r in summary.receipts] == ["identical"]
        assert summary.written == []

    def test_show_diff_is_not_a_separate_operation(self, manifold, store, prompt):
        store.seed(DEST / "app/models/widget.rb", "edited\n")
        prompt.push(
            ConflictDecision.show_diff(),
            ConflictDecision.show_diff(),
            ConflictDecision.show_diff(),
            ConflictDecision.overwrite(),
        )
        summary = manifold.invoke("model", ["widget"])
        assert len(summary.receipts) == 1
        assert summary.receipts[0].status == "overwritten"
        assert summary.receipts[0].diff_shown == 3

    def test_argument_error_leaves_store_untouched(self, manifold, store):
        with pytest.raises(TooFewArgumentsError):
            manifold.invoke("model", [])
        assert store.writes == []
        assert store.mkdirs == []


# ── Abort ────────────────────────────────────────────────────────────


class TestAbort:
    def test_abort_stops_before_next_action(self, prompt: ScriptedPrompt):
        store = MemoryStore({DEST / "b.txt": "mine\n"})
        manifold = _manifold(store, prompt, gen=[_write("a.txt"), _write("b.txt"), _write("c.txt")])
        prompt.push(ConflictDecision.abort())

        summary = manifold.invoke("gen")

        assert [r.status for r in summary.receipts] == ["created", "aborted"]
        assert summary.aborted
        assert summary.aborted_at.destination == str(DEST / "b.txt")
        assert "Aborted at" in summary.error
        assert DEST / "c.txt" not in store.files
        assert store.text(DEST / "b.txt") == "mine\n"

    def test_abort_in_dependency_unwinds_parent(self, prompt: ScriptedPrompt):
        store = MemoryStore({DEST / "child.txt": "mine\n"})
        manifold = _manifold(
            store,
            prompt,
            parent=[Action.dependency("child"), _write("parent.txt")],
            child=[_write("child.txt")],
        )
        prompt.push(ConflictDecision.abort())

        summary = manifold.invoke("parent")

        assert summary.aborted
        assert summary.invocations == ["parent", "child"]
        assert DEST / "parent.txt" not in store.files

    def test_store_failure_is_an_abort(self, store: MemoryStore, prompt: ScriptedPrompt):
        store.set_failure(DEST / "b.txt")
        manifold = _manifold(store, prompt, gen=[_write("a.txt"), _write("b.txt"), _write("c.txt")])

        summary = manifold.invoke("gen")

        assert [r.status for r in summary.receipts] == ["created", "aborted"]
        assert "Permission denied" in summary.receipts[1].error
        assert "Permission denied" in summary.error
        assert DEST / "c.txt" not in store.files

    def test_unreadable_source_is_an_abort(self, store: MemoryStore, prompt: ScriptedPrompt, source_root: Path):
        manifold = Manifold(DEST, prompt, store=store)
        manifold.register("gen", Generator(
            "gen",
            actions=[_write("a.txt"), Action.file("missing.txt", "b.txt"), _write("c.txt")],
            source_root=source_root,
        ))

        summary = manifold.invoke("gen")

        assert summary.aborted
        assert summary.aborted_at is None
        assert "Cannot read source" in summary.error
        assert _order(summary) == ["a.txt"]

    def test_undecodable_template_is_an_abort(self, store: MemoryStore, prompt: ScriptedPrompt, source_root: Path):
        (source_root / "bad.j2").write_bytes(b"\xff\xfe bad")
        manifold = Manifold(DEST, prompt, store=store)
        manifold.register("gen", Generator(
            "gen",
            actions=[_write("a.txt"), Action.template("bad.j2", "b.txt"), _write("c.txt")],
            source_root=source_root,
        ))

        summary = manifold.invoke("gen")

        assert summary.aborted
        assert "Cannot decode template" in summary.error
        assert "bad.j2" in summary.error
        assert _order(summary) == ["a.txt"]


# ── Dependencies ─────────────────────────────────────────────────────


class TestDependencyOrdering:
    def test_dependency_tree_completes_before_next_action(self, store: MemoryStore, prompt: ScriptedPrompt):
        manifold = _manifold(
            store,
            prompt,
            app=[Action.dependency("x"), _write("f1")],
            x=[Action.dependency("y"), _write("fx")],
            y=[_write("fy")],
        )
        summary = manifold.invoke("app")
        assert summary.invocations == ["app", "x", "y"]
        assert _order(summary) == ["fy", "fx", "f1"]
        assert [key.name for key, _ in store.writes] == ["fy", "fx", "f1"]

    def test_interleaved_with_own_actions(self, store: MemoryStore, prompt: ScriptedPrompt):
        manifold = _manifold(
            store,
            prompt,
            app=[_write("f0"), Action.dependency("x"), _write("f1")],
            x=[_write("fx")],
        )
        assert _order(manifold.invoke("app")) == ["f0", "fx", "f1"]

    def test_repeated_dependencies_run_each_time(self, store: MemoryStore, prompt: ScriptedPrompt):
        manifold = _manifold(
            store,
            prompt,
            x=[Action.dependency("y"), Action.dependency("y")],
            y=[_write("fy")],
        )
        summary = manifold.invoke("x")
        assert summary.invocations == ["x", "y", "y"]
        assert [r.status for r in summary.receipts] == ["created", "identical"]

    def test_dependency_receives_derived_arguments(self, store: MemoryStore, prompt: ScriptedPrompt):
        manifold = Manifold(DEST, prompt, store=store)
        manifold.register("model", Generator(
            "model",
            arguments=[ArgumentSpec(name="name")],
            actions=[Action.dependency("test", ["{name}_spec"])],
        ))
        manifold.register("test", Generator(
            "test",
            arguments=[ArgumentSpec(name="file")],
            actions=[_write("spec/{file}.rb", "# {{ file }}\n")],
        ))
        manifold.invoke("model", ["widget"])
        assert store.text(DEST / "spec/widget_spec.rb") == "# widget_spec\n"

    def test_unset_parent_values_fall_back_to_child_defaults(self, store: MemoryStore, prompt: ScriptedPrompt):
        manifold = Manifold(DEST, prompt, store=store)
        manifold.register("model", Generator(
            "model",
            arguments=[ArgumentSpec(name="name"), ArgumentSpec(name="parent", required=False)],
            options=[ArgumentSpec(name="table", required=False)],
            actions=[Action.dependency("child", ["{name}", "{parent}"], {"table": "{table}"})],
        ))
        manifold.register("child", Generator(
            "child",
            arguments=[ArgumentSpec(name="name"), ArgumentSpec(name="parent", required=False, default="Base")],
            options=[ArgumentSpec(name="table", required=False, default="items")],
            actions=[_write("{name}.txt", "{{ parent }} {{ table }}\n")],
        ))
        summary = manifold.invoke("model", ["widget"])
        assert summary.invocations == ["model", "child"]
        assert store.text(DEST / "widget.txt") == "Base items\n"

    def test_unknown_dependency_keeps_earlier_writes(self, store: MemoryStore, prompt: ScriptedPrompt):
        manifold = _manifold(store, prompt, app=[_write("f0"), Action.dependency("ghost")])
        with pytest.raises(GeneratorError, match="unknown generator 'ghost'"):
            manifold.invoke("app")
        assert DEST / "f0" in store.files

    def test_cycle_is_bounded(self, store: MemoryStore, prompt: ScriptedPrompt):
        manifold = _manifold(
            store,
            prompt,
            a=[Action.dependency("b")],
            b=[Action.dependency("a")],
        )
        manifold.max_invocations = 5
        with pytest.raises(GeneratorError, match="Exceeded 5"):
            manifold.invoke("a")


# ── Registry ─────────────────────────────────────────────────────────


class TestRegistry:
    def test_unknown_generator(self, store: MemoryStore, prompt: ScriptedPrompt):
        manifold = _manifold(store, prompt, app=[])
        with pytest.raises(TemplaterError, match="Unknown generator 'nope'") as exc:
            manifold.invoke("nope")
        assert not isinstance(exc.value, GeneratorError)

    def test_replacement_warns(self, store, prompt, caplog):
        manifold = _manifold(store, prompt, app=[])
        with caplog.at_level(logging.WARNING, logger="templater"):
            manifold.register("app", Generator("app"))
        assert "Replacing existing generator: app" in caplog.text

    def test_lookup(self, store: MemoryStore, prompt: ScriptedPrompt):
        manifold = _manifold(store, prompt, app=[], lib=[])
        assert "app" in manifold
        assert list(manifold.generators()) == ["app", "lib"]
        manifold.unregister("app")
        assert manifold.get("app") is None


# ── Guards, dry run, audit ───────────────────────────────────────────


class TestEmptyDirectoryGuard:
    def test_warns_on_write_inside_empty_directory(self, store, prompt, caplog):
        manifold = _manifold(
            store,
            prompt,
            app=[Action.empty_directory("tmp"), _write("tmp/cache.txt")],
        )
        with caplog.at_level(logging.WARNING, logger="templater"):
            summary = manifold.invoke("app")
        assert "declared empty" in caplog.text
        assert [r.status for r in summary.receipts] == ["created", "created"]


class TestDryRun:
    def test_reports_without_writing(self, prompt: ScriptedPrompt):
        store = MemoryStore({DEST / "b.txt": "mine\n"})
        manifold = Manifold(DEST, prompt, store=store, dry_run=True)
        manifold.register("gen", Generator(
            "gen",
            actions=[Action.directory("lib"), _write("a.txt"), _write("b.txt")],
        ))
        summary = manifold.invoke("gen")
        assert [r.status for r in summary.receipts] == ["created", "created", "conflict"]
        assert summary.dry_run
        assert summary.written == []
        assert store.writes == []
        assert store.mkdirs == []
        assert prompt.call_count == 0


class TestAudit:
    def test_entry_per_run(self, store: MemoryStore, prompt: ScriptedPrompt, tmp_path: Path):
        writer = AuditWriter(tmp_path / "audit" / "runs.ndjson")
        manifold = _manifold(store, prompt, app=[Action.dependency("x"), _write("f1")], x=[_write("fx")])
        manifold.audit_writer = writer

        summary = manifold.invoke("app")

        [entry] = writer.read_all()
        assert entry.operation_id == summary.operation_id
        assert entry.generator == "app"
        assert entry.invocations == ["app", "x"]
        assert entry.status == "ok"
        assert entry.operations_written == 2
        assert entry.destination_root == str(DEST)

    def test_entry_written_when_generator_fails(self, store, prompt, tmp_path: Path):
        writer = AuditWriter(tmp_path / "runs.ndjson")
        manifold = _manifold(store, prompt, app=[Action.dependency("ghost")])
        manifold.audit_writer = writer
        with pytest.raises(GeneratorError):
            manifold.invoke("app")
        [entry] = writer.read_all()
        assert "ghost" in entry.error

    def test_operation_ids_are_unique(self):
        ids = {generate_operation_id() for _ in range(20)}
        assert len(ids) == 20
        assert all(i.startswith("run-") for i in ids)
