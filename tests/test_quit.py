import io

from findkit.find.matchers.base import Config, Dependencies, DirEntry, MatcherIO
from findkit.find.matchers.quit import QuitMatcher
from findkit.find.walk import SearchResult, process_dir


def test_quits_when_matched(tmp_path):
    simple = tmp_path / "simple"
    simple.mkdir()
    deps = Dependencies(io.StringIO())
    matcher_io = MatcherIO(deps)
    assert not matcher_io.should_quit()
    assert QuitMatcher().matches(DirEntry(str(simple)), matcher_io)
    assert matcher_io.should_quit()


def test_quit_stops_walk_after_first_entry(tmp_path):
    simple = tmp_path / "simple"
    (simple / "subdir").mkdir(parents=True)
    (simple / "abbbc").write_text("abbbc")
    deps = Dependencies(io.StringIO())
    result = process_dir(str(simple), Config(sorted_output=True), deps, QuitMatcher())
    assert result == SearchResult(found_count=1, quit=True)
    assert deps.output.getvalue() == ""