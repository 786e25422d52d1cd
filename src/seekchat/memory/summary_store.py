"""Plain-text summary files for past conversations.

A summary file looks like:

    标题：<title>
    主旨：<synopsis>

    对话历史：
    2025/01/05 14:03:22 - 用户: <content>
    2025/01/05 14:03:30 - AI: <content>

Turns longer than the truncate length are written as a placeholder, so
restoring such a file recovers the placeholder rather than the text.
"""

import logging
import re
import time
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from ..errors import IndexOutOfRangeError, MalformedSummaryError, StorageError
from .models import ConversationHistory, ConversationTurn, LoadedSummary, Role

logger = logging.getLogger(__name__)

TITLE_LABEL = "标题："
SYNOPSIS_LABEL = "主旨："
HISTORY_LABEL = "对话历史："
ROLE_LABELS = {Role.USER: "用户", Role.ASSISTANT: "AI"}
PLACEHOLDER = "[**]"
TIMESTAMP_FORMAT = "%Y/%m/%d %H:%M:%S"

FILE_PREFIX = "summary_"
FILE_SUFFIX = ".txt"
MAX_TITLE_LENGTH = 50

# Turns restored from a file into the live history
LOADED_HISTORY_LIMIT = 10

_TITLE_PATTERN = re.compile(r"标题[：:]\s*(.*)")
_SYNOPSIS_PATTERN = re.compile(r"主旨[：:]\s*(.*)")
_ILLEGAL_FILENAME_CHARS = re.compile(r'[:/\\*?"<>|]')
_LABEL_ROLES = {label: role for role, label in ROLE_LABELS.items()}


def sanitize_title(title: str) -> str:
    """Make a title safe to embed in a file name."""
    cleaned = _ILLEGAL_FILENAME_CHARS.sub("", title)
    cleaned = re.sub(r"\s+", "_", cleaned.strip())
    return cleaned[:MAX_TITLE_LENGTH] or "untitled"


def extract_title_and_synopsis(text: str) -> tuple[str, str]:
    """Pull the labelled title and synopsis lines out of a model reply.

    Raises:
        MalformedSummaryError: If either label is missing
    """
    title_match = _TITLE_PATTERN.search(text)
    synopsis_match = _SYNOPSIS_PATTERN.search(text)
    if not title_match or not synopsis_match:
        raise MalformedSummaryError("could not find a title and synopsis in the reply")
    return title_match.group(1).strip(), synopsis_match.group(1).strip()


def _parse_turn(line: str) -> ConversationTurn | None:
    """Parse '<timestamp> - <role label>: <content>', or None if malformed."""
    timestamp_text, sep, rest = line.partition(" - ")
    if not sep:
        return None
    label, sep, content = rest.partition(":")
    if not sep or label.strip() not in _LABEL_ROLES:
        return None
    try:
        timestamp = datetime.strptime(timestamp_text.strip(), TIMESTAMP_FORMAT)
    except ValueError:
        return None
    return ConversationTurn(
        role=_LABEL_ROLES[label.strip()],
        content=content[1:] if content.startswith(" ") else content,
        timestamp=timestamp,
    )


class SummaryStore:
    """Save, list, load and delete summary files in one directory.

    Files are addressed by a 1-based index into list_files(), which is
    ordered by file name and therefore by creation time.
    """

    def __init__(
        self,
        directory: Path,
        truncate_length: int = 300,
        clock: Callable[[], float] = time.time,
    ):
        self._directory = Path(directory)
        self._truncate_length = truncate_length
        self._clock = clock

    @property
    def directory(self) -> Path:
        return self._directory

    def save(self, history: ConversationHistory, summary_text: str) -> Path:
        """Write the history under the title/synopsis found in summary_text.

        Raises:
            MalformedSummaryError: Title or synopsis missing; nothing is written
            StorageError: The file could not be written
        """
        title, synopsis = extract_title_and_synopsis(summary_text)

        lines = [f"{TITLE_LABEL}{title}", f"{SYNOPSIS_LABEL}{synopsis}", "", HISTORY_LABEL]
        for turn in history.turns:
            content = PLACEHOLDER if len(turn.content) > self._truncate_length else turn.content
            stamp = turn.timestamp.strftime(TIMESTAMP_FORMAT)
            lines.append(f"{stamp} - {ROLE_LABELS[turn.role]}: {content}")

        path = self._directory
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            path = self._unique_path(sanitize_title(title))
            path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        except OSError as exc:
            raise StorageError("write", path, exc) from exc
        logger.debug("Wrote summary %s (%d turns)", path, len(history))
        return path

    def list_files(self) -> list[str]:
        """Names of the summary files, in index order."""
        if not self._directory.is_dir():
            return []
        try:
            entries = list(self._directory.iterdir())
        except OSError as exc:
            raise StorageError("list", self._directory, exc) from exc
        return sorted(
            entry.name
            for entry in entries
            if entry.is_file() and entry.name.startswith(FILE_PREFIX) and entry.name.endswith(FILE_SUFFIX)
        )

    def load(self, index: int) -> LoadedSummary:
        """Read the index-th file back.

        Only the last LOADED_HISTORY_LIMIT turns are kept. Lines in the
        history section that are not a turn header, blank lines included,
        are appended to the previous turn's content; with no previous turn
        they are skipped.

        Raises:
            IndexOutOfRangeError: If index does not name a file
            StorageError: If the file cannot be read as UTF-8 text
        """
        path = self._path_at(index)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError("read", path, exc) from exc
        lines = text.removesuffix("\n").split("\n")

        title = lines[0].strip().removeprefix(TITLE_LABEL).strip() if lines else ""
        synopsis = lines[1].strip().removeprefix(SYNOPSIS_LABEL).strip() if len(lines) > 1 else ""

        turns: list[ConversationTurn] = []
        in_history = False
        for number, line in enumerate(lines, 1):
            if not in_history:
                in_history = line.startswith(HISTORY_LABEL)
                continue
            turn = _parse_turn(line)
            if turn is not None:
                turns.append(turn)
            elif turns:
                previous = turns[-1]
                turns[-1] = previous.model_copy(update={"content": f"{previous.content}\n{line}"})
            elif line.strip():
                logger.warning("Skipping malformed history line %d in %s", number, path.name)

        return LoadedSummary(
            path=path,
            title=title,
            synopsis=synopsis,
            turns=turns[-LOADED_HISTORY_LIMIT:],
        )

    def delete(self, index: int) -> Path:
        """Remove the index-th file and return its path.

        Raises:
            IndexOutOfRangeError: If index does not name a file
            StorageError: If the file cannot be removed
        """
        path = self._path_at(index)
        try:
            path.unlink()
        except OSError as exc:
            raise StorageError("delete", path, exc) from exc
        logger.debug("Deleted summary %s", path)
        return path

    def _path_at(self, index: int) -> Path:
        files = self.list_files()
        if index < 1 or index > len(files):
            raise IndexOutOfRangeError(index, len(files))
        return self._directory / files[index - 1]

    def _unique_path(self, sanitized_title: str) -> Path:
        stamp = int(self._clock() * 1000)
        while True:
            path = self._directory / f"{FILE_PREFIX}{stamp}_{sanitized_title}{FILE_SUFFIX}"
            if not path.exists():
                return path
            stamp += 1
