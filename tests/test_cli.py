"""Tests for the Typer command-line interface."""
import asyncio
import json

import pytest
from typer.testing import CliRunner

from streamchat.cli import app
from streamchat.llm.models import Role
from streamchat.models import Conversation, Message
from streamchat.storage import ChatStore
from streamchat.storage.sqlite import SQLiteStorage

runner = CliRunner()


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    """Point the CLI's SQLite storage at a temporary directory."""
    path = tmp_path / "state"
    monkeypatch.setenv("STREAMCHAT_DATA_DIR", str(path))
    monkeypatch.delenv("STREAMCHAT_STORAGE", raising=False)
    return path


def with_store(data_dir, action):
    """Run ``action(store)`` against the CLI's database and return its result."""

    async def run():
        async with ChatStore(SQLiteStorage(data_dir / "streamchat.db")) as store:
            return await action(store)

    return asyncio.run(run())


def seed_history(data_dir) -> None:
    with_store(data_dir, lambda store: store.save_history(Conversation(messages=[
        Message(id="s", role=Role.SYSTEM, content="Be brief.", timestamp=1),
        Message(id="u", role=Role.USER, content="What is 2+2?", timestamp=2),
        Message(id="a", role=Role.ASSISTANT, content="Four.", timestamp=3),
    ])))


class TestPrefsCommand:
    """Tests for `streamchat prefs`."""

    def test_shows_defaults(self, data_dir):
        result = runner.invoke(app, ["prefs"])

        assert result.exit_code == 0
        assert "gpt-5" in result.output
        assert "0.70" in result.output

    def test_updates_are_persisted(self, data_dir):
        result = runner.invoke(app, ["prefs", "--model", "gpt-4.1", "-t", "1.5", "--max-tokens", "99.6"])

        assert result.exit_code == 0
        preferences = with_store(data_dir, lambda store: store.load_preferences())
        assert preferences.model == "gpt-4.1"
        assert preferences.temperature == 1.0
        assert preferences.max_tokens == 100

    def test_empty_max_tokens_unsets(self, data_dir):
        runner.invoke(app, ["prefs", "--max-tokens", "50"])
        runner.invoke(app, ["prefs", "--max-tokens", ""])

        assert with_store(data_dir, lambda store: store.load_preferences()).max_tokens is None


class TestHistoryCommands:
    """Tests for `history`, `clear` and `export`."""

    def test_history_empty(self, data_dir):
        result = runner.invoke(app, ["history"])
        assert "No messages yet." in result.output

    def test_history_hides_system_message(self, data_dir):
        seed_history(data_dir)

        result = runner.invoke(app, ["history"])

        assert "What is 2+2?" in result.output
        assert "Four." in result.output
        assert "Be brief." not in result.output

    def test_clear(self, data_dir):
        seed_history(data_dir)

        result = runner.invoke(app, ["clear"])

        assert result.exit_code == 0
        assert with_store(data_dir, lambda store: store.load_history()).messages == []

    def test_export(self, data_dir, tmp_path):
        seed_history(data_dir)
        target = tmp_path / "out.json"

        result = runner.invoke(app, ["export", str(target)])

        assert result.exit_code == 0
        payload = json.loads(target.read_text(encoding="utf-8"))
        assert set(payload) == {"generatedAt", "preferences", "messages"}
        assert [m["id"] for m in payload["messages"]] == ["s", "u", "a"]


class TestServeCommand:
    """Tests for `streamchat serve`."""

    def test_requires_api_key(self, data_dir, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)

        result = runner.invoke(app, ["serve"])

        assert result.exit_code == 1
        assert "OPENAI_API_KEY" in result.output
