"""
Tests for prompts and clipboard modules
"""

import click
import pyperclip
import pytest
from unittest.mock import patch

from assume_setup import prompts
from assume_setup.clipboard import ClipboardError, copy_to_clipboard


@pytest.mark.unit
class TestAskText:
    """Test cases for ask_text."""

    @patch("assume_setup.prompts.click.prompt")
    def test_returns_stripped_answer(self, mock_prompt):
        mock_prompt.return_value = "  prod  "
        assert prompts.ask_text("Key") == "prod"

    @patch("assume_setup.prompts.click.prompt")
    def test_empty_answer_is_none(self, mock_prompt):
        mock_prompt.return_value = ""
        assert prompts.ask_text("Key") is None

    @patch("assume_setup.prompts.click.prompt")
    def test_abort_is_none(self, mock_prompt):
        mock_prompt.side_effect = click.Abort()
        assert prompts.ask_text("Key") is None


@pytest.mark.unit
class TestSelect:
    """Test cases for select."""

    @patch("assume_setup.prompts.ask_text")
    def test_select_by_number(self, mock_ask):
        mock_ask.return_value = "2"
        assert prompts.select("Choose", ["prod", "audit"]) == "audit"

    @patch("assume_setup.prompts.ask_text")
    def test_select_by_name(self, mock_ask):
        mock_ask.return_value = "prod"
        assert prompts.select("Choose", ["prod", "audit"]) == "prod"

    @patch("assume_setup.prompts.ask_text")
    def test_numeric_option_name_wins_over_index(self, mock_ask):
        mock_ask.return_value = "1"
        assert prompts.select("Choose", ["2", "1"]) == "1"

    @patch("assume_setup.prompts.ask_text")
    def test_out_of_range_number_asks_again(self, mock_ask):
        mock_ask.side_effect = ["3", "1"]
        assert prompts.select("Choose", ["prod", "audit"]) == "prod"
        assert mock_ask.call_count == 2

    @patch("assume_setup.prompts.ask_text")
    def test_typo_asks_again(self, mock_ask):
        """Test that a mistyped key is not treated as a cancellation."""
        mock_ask.side_effect = ["prdo", "prod"]
        assert prompts.select("Choose", ["prod", "audit"]) == "prod"
        assert mock_ask.call_count == 2

    @patch("assume_setup.prompts.ask_text")
    def test_typo_then_empty_cancels(self, mock_ask):
        mock_ask.side_effect = ["dev", None]
        assert prompts.select("Choose", ["prod", "audit"]) is None

    @patch("assume_setup.prompts.ask_text")
    def test_cancelled(self, mock_ask):
        mock_ask.return_value = None
        assert prompts.select("Choose", ["prod"]) is None

    @patch("assume_setup.prompts.ask_text")
    def test_no_options_skips_prompt(self, mock_ask):
        assert prompts.select("Choose", []) is None
        mock_ask.assert_not_called()


@pytest.mark.unit
class TestCopyToClipboard:
    """Test cases for copy_to_clipboard."""

    @patch("assume_setup.clipboard.pyperclip.copy")
    def test_copies_text(self, mock_copy):
        copy_to_clipboard("export AWS_ACCESS_KEY_ID=AKID\n")
        mock_copy.assert_called_once_with("export AWS_ACCESS_KEY_ID=AKID\n")

    @patch("assume_setup.clipboard.pyperclip.copy")
    def test_missing_clipboard_mechanism(self, mock_copy):
        mock_copy.side_effect = pyperclip.PyperclipException("no copy/paste mechanism")
        with pytest.raises(ClipboardError, match="Could not copy to clipboard"):
            copy_to_clipboard("text")
