import pytest

from mdpatch.editops import Operation
from mdpatch.errors import BatchOperationError, PatchError
from mdpatch.pipeline import PatchConfig, atomic_write, run_batch, run_patch

DOC = "# Doc\n\n## Sec\n\nHello\n"


def _doc(tmp_path, name="doc.md", text=DOC):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def _append(path, content, heading="## Sec", fingerprint=None):
    return Operation(file=str(path), heading_path=[heading], kind="append", content=content, fingerprint=fingerprint)


def test_run_patch_writes_with_backup(tmp_path):
    path = _doc(tmp_path)
    outcome = run_patch(_append(path, "World"), PatchConfig(force=True))
    assert outcome.status == "applied"
    assert path.read_text(encoding="utf-8") == "# Doc\n\n## Sec\n\nHello\nWorld\n\n"
    assert (tmp_path / "doc.md.bak").read_text(encoding="utf-8") == DOC
    assert sorted(p.name for p in tmp_path.iterdir()) == ["doc.md", "doc.md.bak"]


def test_run_patch_without_backup(tmp_path):
    path = _doc(tmp_path)
    run_patch(_append(path, "World"), PatchConfig(force=True, backup=False))
    assert not (tmp_path / "doc.md.bak").exists()


def test_dry_run_leaves_file_alone(tmp_path):
    path = _doc(tmp_path)
    outcome = run_patch(_append(path, "World"), PatchConfig())
    assert outcome.status == "planned"
    assert "+World" in outcome.result.diff
    assert path.read_text(encoding="utf-8") == DOC
    assert not (tmp_path / "doc.md.bak").exists()


def test_noop_does_not_write(tmp_path):
    path = _doc(tmp_path, text="# Doc\n\n## Sec\n\nHello\nWorld\n")
    outcome = run_patch(_append(path, "World"), PatchConfig(force=True))
    assert outcome.status == "noop"
    assert not (tmp_path / "doc.md.bak").exists()


def test_crlf_is_preserved_on_write(tmp_path):
    path = tmp_path / "doc.md"
    path.write_bytes(b"# Doc\r\n\r\n## Sec\r\n\r\nHello\r\n")
    run_patch(_append(path, "World"), PatchConfig(force=True, backup=False))
    assert path.read_bytes() == b"# Doc\r\n\r\n## Sec\r\n\r\nHello\r\nWorld\r\n\r\n"

    outcome = run_patch(_append(path, "World"), PatchConfig(force=True, backup=False))
    assert outcome.status == "noop"


def test_missing_file(tmp_path):
    with pytest.raises(PatchError):
        run_patch(_append(tmp_path / "missing.md", "x"), PatchConfig(force=True))


def test_atomic_write_creates_new_file(tmp_path):
    target = tmp_path / "new.md"
    atomic_write(str(target), "hi\n")
    assert target.read_text(encoding="utf-8") == "hi\n"
    assert not (tmp_path / "new.md.bak").exists()


def test_batch_failure_writes_nothing(tmp_path):
    a = _doc(tmp_path, "a.md")
    b = _doc(tmp_path, "b.md")
    ops = [_append(a, "One"), _append(b, "Two", fingerprint="NOPE")]
    with pytest.raises(BatchOperationError) as exc:
        run_batch(ops, PatchConfig(force=True))
    assert exc.value.exit_code == 3
    assert exc.value.kind == "fingerprint_mismatch"
    assert exc.value.details["number"] == 2
    assert a.read_text(encoding="utf-8") == DOC
    assert b.read_text(encoding="utf-8") == DOC


def test_batch_chains_operations_on_one_file(tmp_path):
    path = _doc(tmp_path)
    ops = [_append(path, "World"), _append(path, "Again")]
    batch = run_batch(ops, PatchConfig(force=True))
    assert batch.files_written == [str(path)]
    assert [o.status for o in batch.outcomes] == ["applied", "applied"]
    text = path.read_text(encoding="utf-8")
    assert "World" in text and "Again" in text
    assert (tmp_path / "doc.md.bak").read_text(encoding="utf-8") == DOC


def test_batch_plan_mode(tmp_path):
    path = _doc(tmp_path)
    batch = run_batch([_append(path, "World")], PatchConfig())
    assert [o.status for o in batch.outcomes] == ["planned"]
    assert batch.files_written == []
    assert path.read_text(encoding="utf-8") == DOC


def test_batch_rerun_is_noop(tmp_path):
    path = _doc(tmp_path)
    run_batch([_append(path, "World")], PatchConfig(force=True, backup=False))
    batch = run_batch([_append(path, "World")], PatchConfig(force=True, backup=False))
    assert [o.status for o in batch.outcomes] == ["noop"]
    assert batch.files_written == []


def test_batch_treats_path_aliases_as_one_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _doc(tmp_path)
    ops = [_append("doc.md", "One"), _append("./doc.md", "Two")]
    batch = run_batch(ops, PatchConfig(force=True))
    assert batch.files_written == ["doc.md"]
    text = (tmp_path / "doc.md").read_text(encoding="utf-8")
    assert "One" in text and "Two" in text
    assert (tmp_path / "doc.md.bak").read_text(encoding="utf-8") == DOC
