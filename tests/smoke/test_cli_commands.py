"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output.
They don't validate correctness deeply - just that commands work end to end
against a throwaway SQLite database.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

import sys

import pytest
from loguru import logger
from typer.testing import CliRunner

from flashdeck.cli.main import app
from flashdeck.config import get_settings
from flashdeck.db.database import reset_engine
from flashdeck.db.repository import SqlRecordStore

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

runner = CliRunner()

NOTES = """Capital of France? | Paris
Capital of Japan? | Tokyo
Capital of Kenya? | Nairobi
Capital of Peru? | Lima
"""


@pytest.fixture(autouse=True)
def isolated_db(tmp_path, monkeypatch):
    """Point the CLI at a fresh database for every test."""
    monkeypatch.setenv("FLASHDECK_DATABASE_URL", f"sqlite:///{tmp_path / 'cli.db'}")
    monkeypatch.setenv("FLASHDECK_DEFAULT_USER_ID", "tester")
    monkeypatch.setenv("FLASHDECK_DEFAULT_STRATEGY", "uniform")
    get_settings.cache_clear()
    reset_engine()
    yield
    reset_engine()
    get_settings.cache_clear()
    logger.remove()
    logger.add(sys.stderr)


def invoke(*args, input=None):
    result = runner.invoke(app, list(args), input=input)
    return result.exit_code, result.output


@pytest.fixture
def set_id(tmp_path):
    """An initialised database with one imported four-card set."""
    assert invoke("init-db")[0] == 0
    code, _ = invoke("create-set", "Capitals")
    assert code == 0

    notes = tmp_path / "capitals.txt"
    notes.write_text(NOTES, encoding="utf-8")
    (summary,) = SqlRecordStore().list_sets("tester")
    code, output = invoke("import", summary.id, str(notes))
    assert code == 0, output
    assert "Imported 4 card(s)" in output
    return summary.id


class TestCLIHelp:
    """Test that help commands work."""

    def test_main_help(self):
        code, output = invoke("--help")

        assert code == 0
        assert "study" in output
        assert "import" in output

    def test_study_help(self):
        code, output = invoke("study", "--help")

        assert code == 0
        assert "--mode" in output


class TestSetCommands:
    def test_init_db(self):
        code, output = invoke("init-db")

        assert code == 0
        assert "Database ready" in output

    def test_list_sets(self, set_id):
        code, output = invoke("list-sets")

        assert code == 0
        assert "Capitals" in output

    def test_cards_and_edit(self, set_id):
        card = SqlRecordStore().list_cards(set_id)[0]

        code, output = invoke("edit-card", card.id, "--back", "Paris (FR)")
        assert code == 0, output

        assert SqlRecordStore().list_cards(set_id)[0].back == "Paris (FR)"

        code, output = invoke("cards", set_id)
        assert code == 0
        assert "4 card(s)" in output

    def test_add_and_delete_card(self, set_id):
        code, output = invoke("add-card", set_id, "Capital of Chile?", "Santiago")
        assert code == 0, output
        assert SqlRecordStore().get_set(set_id).card_count == 5

        card = SqlRecordStore().list_cards(set_id)[-1]
        code, _ = invoke("delete-card", card.id)
        assert code == 0
        assert SqlRecordStore().get_set(set_id).card_count == 4

    def test_missing_tables_hint(self):
        code, output = invoke("list-sets")

        assert code == 1
        assert "init-db" in output


class TestStatsCommand:
    def test_fresh_set(self, set_id):
        code, output = invoke("stats", set_id, "--cards")

        assert code == 0, output
        assert "Predicted retention" in output
        assert "Weak" in output
        assert "not started" in output
        assert "4 need practice, 4 new" in output

    def test_unknown_set(self, set_id):
        code, output = invoke("stats", "no-such-set")

        assert code == 1
        assert "Set not found" in output


class TestStudyCommand:
    def test_flashcards_session(self, set_id):
        # Enter to flip, then "y" for each of the four cards
        code, output = invoke("study", set_id, "--mode", "flashcards", input="\ny\n" * 4)

        assert code == 0, output
        assert "4/4" in output

    def test_written_test_is_recorded(self, set_id):
        code, output = invoke(
            "study", set_id, "--mode", "test", "--format", "written", input="wrong\n" * 4
        )

        assert code == 0, output
        assert "0/4" in output
        assert "Progress saved" in output

        code, output = invoke("stats", set_id)
        assert code == 0
        assert "Sessions" in output

        (session,) = SqlRecordStore().list_completed_sessions(set_id, "tester")
        assert session.mode == "test:written"
        assert len(session.outcomes) == 4

    def test_quit_abandons(self, set_id):
        code, output = invoke("study", set_id, "--mode", "write", input="q\n")

        assert code == 0, output
        assert "abandoned" in output
        assert SqlRecordStore().list_completed_sessions(set_id, "tester") == []

    def test_write_mode_ignores_blank_answer(self, set_id):
        code, output = invoke("study", set_id, "--mode", "write", input="\n\nq\n")

        assert code == 0, output
        assert "Incorrect" not in output
        assert "abandoned" in output

    def test_weighted_study_shows_focus(self, set_id):
        code, output = invoke(
            "study", set_id, "--mode", "write", "--strategy", "weighted", input="q\n"
        )

        assert code == 0, output
        assert "Focus: 4 need practice, 4 new" in output
        assert "focus card" in output

    def test_multiple_choice_by_number(self, set_id):
        # Always pick option 1; retries are queued for misses, so quit after four answers
        code, output = invoke("study", set_id, "--mode", "learn", input="1\n" * 4 + "q\n")

        assert code == 0, output
        assert "Card 1/4" in output

    def test_mode_needs_more_cards(self, set_id):
        card = SqlRecordStore().list_cards(set_id)[0]
        invoke("delete-card", card.id)

        code, output = invoke("study", set_id, "--mode", "learn")
        assert code == 1
        assert "at least 4" in output
