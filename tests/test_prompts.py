"""Tests for prompt template loading."""
import pytest

from seekchat.prompts import clear_cache, load_prompt, summary_prompt, upload_prompt


@pytest.fixture(autouse=True)
def fresh_prompts():
    clear_cache()
    yield
    clear_cache()


class TestPackagedPrompts:
    """Tests for the prompts shipped with the package."""

    def test_summary_prompt_embeds_transcript(self):
        prompt = summary_prompt("user: hi\nassistant: hello")

        assert "user: hi\nassistant: hello" in prompt
        assert "标题：" in prompt and "主旨：" in prompt
        assert "{conversation}" not in prompt

    def test_upload_prompt_embeds_file_text(self):
        assert upload_prompt("print('x')").endswith("print('x')\n")

    def test_unknown_prompt(self):
        with pytest.raises(FileNotFoundError, match="Prompt 'missing' not found"):
            load_prompt("missing")


class TestLocalOverride:
    """Tests for ./prompts overrides."""

    def test_working_directory_prompt_wins(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "prompts").mkdir()
        (tmp_path / "prompts" / "summary.txt").write_text("Summarize:\n{conversation}", encoding="utf-8")

        assert summary_prompt("user: hi") == "Summarize:\nuser: hi"

    def test_cached_until_cleared(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        override = tmp_path / "prompts" / "upload.txt"
        override.parent.mkdir()
        override.write_text("first {content}", encoding="utf-8")
        assert upload_prompt("x") == "first x"

        override.write_text("second {content}", encoding="utf-8")
        assert upload_prompt("x") == "first x"

        clear_cache()
        assert upload_prompt("x") == "second x"
