from core.collectors.related_collector import RelatedFileCollector
from core.contracts.models import FileEntry
from core.imports import ImportResolver


def write(root, relative, content):
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_imported_sibling_is_loaded(tmp_path):
    body = "export function f() {}\n" * 90  # about 2 KB
    write(tmp_path, "a.js", "import { f } from './b'\n")
    write(tmp_path, "b.js", body)
    change_set = [FileEntry(path="a.js", content="import { f } from './b'\n")]

    candidates = ImportResolver().candidates(change_set)
    related = RelatedFileCollector(tmp_path, candidates, exclude=["a.js"]).collect()["related_files"]

    assert [entry.path for entry in related] == ["b.js"]
    assert related[0].content == body


def test_change_set_paths_are_never_loaded(tmp_path):
    write(tmp_path, "a.js", "a")
    write(tmp_path, "b.js", "b")

    related = RelatedFileCollector(tmp_path, ["a.js", "b.js"], exclude=["a.js"]).load()

    assert [entry.path for entry in related] == ["b.js"]


def test_only_successful_reads_count_toward_the_cap(tmp_path):
    candidates = []
    for i in range(8):
        candidates.append(f"missing{i}.js")
        write(tmp_path, f"f{i}.js", str(i))
        candidates.append(f"f{i}.js")

    related = RelatedFileCollector(tmp_path, candidates, max_files=5).load()

    assert [entry.path for entry in related] == [f"f{i}.js" for i in range(5)]


def test_oversized_and_binary_candidates_are_skipped(tmp_path):
    write(tmp_path, "big.js", "x" * 100)
    (tmp_path / "blob.js").write_bytes(b"\xff\xfe\x00binary")
    write(tmp_path, "ok.js", "x" * 99)

    related = RelatedFileCollector(tmp_path, ["big.js", "blob.js", "ok.js"], max_chars=100).load()

    assert [entry.path for entry in related] == ["ok.js"]


def test_nul_bytes_mark_a_candidate_binary_even_when_valid_utf8(tmp_path):
    (tmp_path / "packed.js").write_bytes(b"module.exports = 1\x00\x00")
    write(tmp_path, "plain.js", "module.exports = 2")

    related = RelatedFileCollector(tmp_path, ["packed.js", "plain.js"]).load()

    assert [entry.path for entry in related] == ["plain.js"]


def test_directories_and_paths_outside_repository_are_skipped(tmp_path):
    repo = tmp_path / "repo"
    (repo / "lib").mkdir(parents=True)
    write(tmp_path, "secret.js", "outside")
    (repo / "link.js").symlink_to(tmp_path / "secret.js")

    related = RelatedFileCollector(repo, ["lib", "../secret.js", "link.js"]).load()

    assert related == []


def test_duplicate_candidates_load_once(tmp_path):
    write(tmp_path, "b.js", "b")

    related = RelatedFileCollector(tmp_path, ["b.js", "b.js"]).load()

    assert len(related) == 1


def test_nothing_to_load(tmp_path):
    assert RelatedFileCollector(tmp_path, []).collect() == {"related_files": []}
