import io

import pytest

from findkit.find.matchers.base import Config, Dependencies, DirEntry, Matcher
from findkit.find.matchers.quit import QuitMatcher
from findkit.find.walk import SearchResult, process_dir, search, walk


class _Print(Matcher):
    def matches(self, entry, matcher_io):
        matcher_io.deps.output.write(entry.path + "\n")
        return True


class _PrintThenPruneOne(Matcher):
    def matches(self, entry, matcher_io):
        matcher_io.deps.output.write(entry.path + "\n")
        if entry.file_name == "1":
            matcher_io.mark_current_dir_to_be_skipped()
        return True


class _PrintThenQuit(Matcher):
    def matches(self, entry, matcher_io):
        matcher_io.deps.output.write(entry.path + "\n")
        return QuitMatcher().matches(entry, matcher_io)


@pytest.fixture
def data_tree(tmp_path, monkeypatch):
    base = tmp_path / "test_data"
    simple = base / "simple"
    (simple / "subdir").mkdir(parents=True)
    (simple / "abbbc").write_text("abbbc")
    (simple / "subdir" / "ABBBC").write_text("ABBBC")
    depth = base / "depth"
    (depth / "1" / "2" / "3").mkdir(parents=True)
    (depth / "f0").write_text("")
    (depth / "1" / "f1").write_text("")
    (depth / "1" / "2" / "f2").write_text("")
    (depth / "1" / "2" / "3" / "f3").write_text("")
    monkeypatch.chdir(tmp_path)
    return base


def _run(root, matcher=None, **config):
    deps = Dependencies(io.StringIO())
    result = process_dir(root, Config(**config), deps, matcher or _Print())
    return result, deps.output.getvalue()


def test_not_depth_first(data_tree):
    result, out = _run("./test_data/simple", sorted_output=True)
    assert out == (
        "./test_data/simple\n"
        "./test_data/simple/abbbc\n"
        "./test_data/simple/subdir\n"
        "./test_data/simple/subdir/ABBBC\n"
    )
    assert result == SearchResult(found_count=4, quit=False)


def test_depth_first(data_tree):
    _, out = _run("./test_data/simple", sorted_output=True, depth_first=True)
    assert out == (
        "./test_data/simple/abbbc\n"
        "./test_data/simple/subdir/ABBBC\n"
        "./test_data/simple/subdir\n"
        "./test_data/simple\n"
    )


def test_maxdepth(data_tree):
    _, out = _run("./test_data/depth", sorted_output=True, max_depth=2)
    assert out == (
        "./test_data/depth\n"
        "./test_data/depth/1\n"
        "./test_data/depth/1/2\n"
        "./test_data/depth/1/f1\n"
        "./test_data/depth/f0\n"
    )


def test_maxdepth_depth_first(data_tree):
    _, out = _run("./test_data/depth", sorted_output=True, max_depth=2, depth_first=True)
    assert out == (
        "./test_data/depth/1/2\n"
        "./test_data/depth/1/f1\n"
        "./test_data/depth/1\n"
        "./test_data/depth/f0\n"
        "./test_data/depth\n"
    )


def test_prune(data_tree):
    _, out = _run("./test_data/depth", _PrintThenPruneOne(), sorted_output=True)
    assert out == "./test_data/depth\n./test_data/depth/1\n./test_data/depth/f0\n"


@pytest.mark.parametrize("depth_first", [False, True])
def test_zero_maxdepth(data_tree, depth_first):
    _, out = _run("./test_data/depth", max_depth=0, depth_first=depth_first)
    assert out == "./test_data/depth\n"


def test_mindepth(data_tree):
    _, out = _run("./test_data/depth", sorted_output=True, min_depth=3)
    assert out == (
        "./test_data/depth/1/2/3\n"
        "./test_data/depth/1/2/3/f3\n"
        "./test_data/depth/1/2/f2\n"
    )


def test_mindepth_depth_first(data_tree):
    _, out = _run("./test_data/depth", sorted_output=True, min_depth=3, depth_first=True)
    assert out == (
        "./test_data/depth/1/2/3/f3\n"
        "./test_data/depth/1/2/3\n"
        "./test_data/depth/1/2/f2\n"
    )


def test_same_file_system_does_not_prune(data_tree):
    _, plain = _run("./test_data/simple", sorted_output=True)
    _, xdev = _run("./test_data/simple", sorted_output=True, same_file_system=True)
    assert xdev == plain
    assert "abbbc" in xdev


def test_unsorted_walk_finds_same_entries(data_tree):
    sorted_paths = [e.path for e in walk("./test_data/depth", Config(sorted_output=True))]
    unsorted_paths = [e.path for e in walk("./test_data/depth", Config())]
    assert sorted(unsorted_paths) == sorted(sorted_paths)
    assert unsorted_paths[0] == "./test_data/depth"


def test_walk_depths_match_paths(data_tree):
    for entry in walk("./test_data/depth", Config(sorted_output=True)):
        assert isinstance(entry, DirEntry)
        relative = entry.path[len("./test_data/depth"):]
        assert entry.depth == relative.count("/")


def test_walk_send_skips_directory(data_tree):
    entries = walk("./test_data/depth", Config(sorted_output=True))
    assert next(entries).path == "./test_data/depth"
    assert next(entries).path == "./test_data/depth/1"
    assert entries.send(True).path == "./test_data/depth/f0"
    with pytest.raises(StopIteration):
        next(entries)


def test_walk_missing_root_yields_error(tmp_path):
    items = list(walk(str(tmp_path / "missing"), Config()))
    assert len(items) == 1
    assert isinstance(items[0], FileNotFoundError)


def test_process_dir_reports_errors(tmp_path, capsys):
    result, out = _run(str(tmp_path / "missing"))
    assert result == SearchResult(found_count=0, quit=False)
    assert out == ""
    assert capsys.readouterr().err.startswith("Error: ")


def test_print_then_quit(data_tree):
    deps = Dependencies(io.StringIO())
    result = search(
        ["./test_data/simple", "./test_data/simple"], Config(), deps, _PrintThenQuit()
    )
    assert deps.output.getvalue() == "./test_data/simple\n"
    assert result == SearchResult(found_count=1, quit=True)


def test_search_adds_up_counts(data_tree):
    deps = Dependencies(io.StringIO())
    config = Config(sorted_output=True)
    single = process_dir("./test_data/simple", config, Dependencies(io.StringIO()), _Print())
    both = search(["./test_data/simple", "./test_data/simple"], config, deps, _Print())
    assert both.found_count == 2 * single.found_count
    assert not both.quit