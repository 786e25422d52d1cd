"""Tests for summary file persistence."""
import logging
from datetime import datetime

import pytest
from hypothesis import given
from hypothesis import strategies as st

from seekchat.errors import IndexOutOfRangeError, MalformedSummaryError, StorageError
from seekchat.memory import ConversationHistory, ConversationTurn, Role, SummaryStore
from seekchat.memory.summary_store import (
    LOADED_HISTORY_LIMIT,
    MAX_TITLE_LENGTH,
    PLACEHOLDER,
    extract_title_and_synopsis,
    sanitize_title,
)

SUMMARY_REPLY = "标题：T\n主旨：S"
STAMP = datetime(2025, 1, 5, 14, 3, 22)


def _history(*contents: str) -> ConversationHistory:
    history = ConversationHistory()
    for i, content in enumerate(contents):
        role = Role.USER if i % 2 == 0 else Role.ASSISTANT
        history.append(ConversationTurn(role=role, content=content, timestamp=STAMP))
    return history


class _Clock:
    def __init__(self, start: float = 1736085802.0):
        self.now = start

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def store(summary_dir):
    return SummaryStore(summary_dir, truncate_length=300, clock=_Clock())


class TestSave:
    """Tests for writing summary files."""

    def test_file_layout(self, store):
        """The file carries the labels, a blank line and one line per turn."""
        path = store.save(_history("hello", "hi there"), SUMMARY_REPLY)

        assert path.name == "summary_1736085802000_T.txt"
        assert path.read_text(encoding="utf-8") == (
            "标题：T\n"
            "主旨：S\n"
            "\n"
            "对话历史：\n"
            "2025/01/05 14:03:22 - 用户: hello\n"
            "2025/01/05 14:03:22 - AI: hi there\n"
        )

    def test_long_turn_written_as_placeholder(self, summary_dir):
        """Turns over the truncate length are replaced in the file."""
        store = SummaryStore(summary_dir, truncate_length=5, clock=_Clock())
        store.save(_history("short", "much longer"), SUMMARY_REPLY)

        loaded = store.load(1)
        assert [turn.content for turn in loaded.turns] == ["short", PLACEHOLDER]

    def test_malformed_reply_writes_nothing(self, store, summary_dir):
        """A reply without both labels is rejected before any file is created."""
        with pytest.raises(MalformedSummaryError):
            store.save(_history("hello"), "标题：only a title")

        assert list(summary_dir.iterdir()) == []

    def test_same_millisecond_gets_distinct_names(self, store):
        """Two saves at the same instant do not overwrite each other."""
        first = store.save(_history("a"), SUMMARY_REPLY)
        second = store.save(_history("b"), SUMMARY_REPLY)

        assert first != second
        assert len(store.list_files()) == 2

    def test_creates_missing_directory(self, tmp_path):
        store = SummaryStore(tmp_path / "nested" / "dir", clock=_Clock())
        path = store.save(_history("a"), SUMMARY_REPLY)
        assert path.exists()

    def test_unwritable_directory_raises_storage_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        store = SummaryStore(blocker / "summaries", clock=_Clock())

        with pytest.raises(StorageError, match="Could not write"):
            store.save(_history("a"), SUMMARY_REPLY)


class TestLoad:
    """Tests for reading summary files back."""

    def test_round_trip(self, store):
        """Title, synopsis and turns survive a save and load."""
        store.save(_history("question", "answer"), SUMMARY_REPLY)
        loaded = store.load(1)

        assert loaded.title == "T"
        assert loaded.synopsis == "S"
        assert [(turn.role, turn.content) for turn in loaded.turns] == [
            (Role.USER, "question"),
            (Role.ASSISTANT, "answer"),
        ]
        assert all(turn.timestamp == STAMP for turn in loaded.turns)

    def test_keeps_only_latest_turns(self, store):
        """Loading restores at most the last LOADED_HISTORY_LIMIT turns."""
        contents = [f"turn {i}" for i in range(15)]
        store.save(_history(*contents), SUMMARY_REPLY)

        loaded = store.load(1)
        assert len(loaded.turns) == LOADED_HISTORY_LIMIT
        assert [turn.content for turn in loaded.turns] == contents[-LOADED_HISTORY_LIMIT:]

    def test_multiline_content_round_trips(self, store):
        """Lines after a turn header are continuations of that turn."""
        store.save(_history("line one\nline two\n  indented"), SUMMARY_REPLY)
        assert store.load(1).turns[0].content == "line one\nline two\n  indented"

    @pytest.mark.parametrize(
        "content",
        ["para one\n\npara two", "ends with newline\n", "\n\nleading blanks", "a\n\n\n\nb"],
    )
    def test_blank_lines_round_trip(self, store, content):
        """Blank lines inside a turn are kept, including trailing ones."""
        store.save(_history(content, "reply"), SUMMARY_REPLY)

        turns = store.load(1).turns
        assert [turn.content for turn in turns] == [content, "reply"]

    def test_malformed_line_before_first_turn_is_skipped(self, store, summary_dir, caplog):
        (summary_dir / "summary_1_x.txt").write_text(
            "标题：x\n主旨：y\n\n对话历史：\ngarbage line\n2025/01/05 14:03:22 - 用户: ok\n",
            encoding="utf-8",
        )

        with caplog.at_level(logging.WARNING, logger="seekchat.memory.summary_store"):
            loaded = store.load(1)

        assert [turn.content for turn in loaded.turns] == ["ok"]
        assert "Skipping malformed history line" in caplog.text

    def test_unknown_role_label_is_not_a_turn(self, store, summary_dir):
        (summary_dir / "summary_1_x.txt").write_text(
            "标题：x\n主旨：y\n\n对话历史：\n2025/01/05 14:03:22 - 用户: hi\n2025/01/05 14:03:23 - bot: nope\n",
            encoding="utf-8",
        )

        turns = store.load(1).turns
        assert len(turns) == 1
        assert turns[0].content == "hi\n2025/01/05 14:03:23 - bot: nope"

    def test_undecodable_file_raises_storage_error(self, store, summary_dir):
        (summary_dir / "summary_1_x.txt").write_bytes(b"\xff\xfe\x00broken")

        with pytest.raises(StorageError, match="Could not read"):
            store.load(1)

    @pytest.mark.parametrize("index", [0, 1, -1])
    def test_empty_directory_is_out_of_range(self, store, summary_dir, index):
        with pytest.raises(IndexOutOfRangeError, match="no summary files found"):
            store.load(index)
        assert list(summary_dir.iterdir()) == []

    def test_index_past_end(self, store):
        store.save(_history("a"), SUMMARY_REPLY)
        with pytest.raises(IndexOutOfRangeError, match="between 1 and 1"):
            store.load(2)


class TestListAndDelete:
    """Tests for listing and deleting summary files."""

    def test_lists_only_summary_files_in_order(self, store, summary_dir):
        (summary_dir / "notes.txt").write_text("unrelated", encoding="utf-8")
        (summary_dir / "summary_2_b.txt").write_text("", encoding="utf-8")
        (summary_dir / "summary_1_a.txt").write_text("", encoding="utf-8")

        assert store.list_files() == ["summary_1_a.txt", "summary_2_b.txt"]

    def test_missing_directory_lists_nothing(self, tmp_path):
        assert SummaryStore(tmp_path / "absent").list_files() == []

    def test_delete_by_index(self, store, summary_dir):
        (summary_dir / "summary_1_a.txt").write_text("", encoding="utf-8")
        (summary_dir / "summary_2_b.txt").write_text("", encoding="utf-8")

        deleted = store.delete(1)

        assert deleted.name == "summary_1_a.txt"
        assert store.list_files() == ["summary_2_b.txt"]

    def test_delete_out_of_range_touches_nothing(self, store, summary_dir):
        (summary_dir / "summary_1_a.txt").write_text("", encoding="utf-8")

        with pytest.raises(IndexOutOfRangeError):
            store.delete(3)
        assert store.list_files() == ["summary_1_a.txt"]


class TestTitleHelpers:
    """Tests for title extraction and sanitizing."""

    def test_extracts_labels_anywhere_in_reply(self):
        reply = "Sure!\n标题：  Python 入门\n主旨：介绍基础语法\n"
        assert extract_title_and_synopsis(reply) == ("Python 入门", "介绍基础语法")

    def test_accepts_ascii_colon(self):
        assert extract_title_and_synopsis("标题: A\n主旨: B") == ("A", "B")

    def test_missing_synopsis_raises(self):
        with pytest.raises(MalformedSummaryError, match="Malformed summary"):
            extract_title_and_synopsis("标题：A")

    def test_sanitize_removes_illegal_characters(self):
        assert sanitize_title('a/b:c*d?"e<f>g|h\\i') == "abcdefghi"

    def test_sanitize_collapses_whitespace(self):
        assert sanitize_title("  hello   big  world ") == "hello_big_world"

    def test_sanitize_empty_title(self):
        assert sanitize_title("???") == "untitled"

    @given(st.text(max_size=200))
    def test_sanitized_title_is_filename_safe(self, title):
        cleaned = sanitize_title(title)

        assert 0 < len(cleaned) <= MAX_TITLE_LENGTH
        assert not set(cleaned) & set(':/\\*?"<>|')
        assert not any(ch.isspace() for ch in cleaned)
