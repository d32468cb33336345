"""
Tests for handlers/helpers.py
"""

import pytest
from outlook_mcp.handlers.helpers import (
    extract_body_text,
    extract_email_info,
    format_address,
    format_email_line,
    format_timestamp,
    html_to_text,
)


class TestFormatAddress:
    """Tests for format_address function."""

    def test_name_and_address(self):
        recipient = {"emailAddress": {"name": "Alice", "address": "alice@example.com"}}
        assert format_address(recipient) == "Alice (alice@example.com)"

    def test_missing_parts(self):
        assert format_address({"emailAddress": {"address": "x@example.com"}}) == "Unknown (x@example.com)"
        assert format_address({}) == "Unknown (unknown)"
        assert format_address(None) == "Unknown (unknown)"


class TestExtractEmailInfo:
    """Tests for extract_email_info function."""

    def test_extract_email_info_full(self):
        """Test full email info extraction."""
        msg = {
            "id": "msg123",
            "subject": "Meeting Tomorrow",
            "from": {"emailAddress": {"name": "Alice", "address": "alice@example.com"}},
            "toRecipients": [{"emailAddress": {"name": "Bob", "address": "bob@example.com"}}],
            "ccRecipients": [{"emailAddress": {"name": "Charlie", "address": "charlie@example.com"}}],
            "bodyPreview": "This is a preview...",
            "categories": ["Red"],
            "isRead": False,
            "hasAttachments": True,
        }

        info = extract_email_info(msg)

        assert info["id"] == "msg123"
        assert info["subject"] == "Meeting Tomorrow"
        assert info["from"] == "Alice (alice@example.com)"
        assert info["to"] == ["Bob (bob@example.com)"]
        assert info["cc"] == ["Charlie (charlie@example.com)"]
        assert info["snippet"] == "This is a preview..."
        assert info["categories"] == ["Red"]
        assert info["is_read"] is False
        assert info["has_attachments"] is True

    def test_extract_email_info_defaults(self):
        """Test email info extraction from a sparse message."""
        info = extract_email_info({"id": "msg123"})

        assert info["subject"] == "No Subject"
        assert info["from"] == "Unknown (unknown)"
        assert info["to"] == []
        assert info["cc"] == []
        assert info["date"] == "Unknown"
        assert info["snippet"] == ""
        assert info["categories"] == []
        assert info["is_read"] is True


class TestFormatTimestamp:
    """Tests for format_timestamp function."""

    def test_unparseable_passes_through(self):
        assert format_timestamp("not a timestamp") == "not a timestamp"

    def test_empty(self):
        assert format_timestamp("") == "Unknown"

    def test_iso_timestamp(self):
        result = format_timestamp("2024-01-15T10:00:00Z")
        assert len(result) == len("2024-01-15 10:00")
        assert result.startswith("2024-01-1")


class TestFormatEmailLine:
    """Tests for format_email_line function."""

    def test_unread_with_categories(self):
        msg = {"id": "abc", "subject": "Hi", "isRead": False, "categories": ["Red", "Blue"]}

        line = format_email_line(msg, 3, show_categories=True)

        assert line.startswith("3. [UNREAD] [Red, Blue] Unknown - From: Unknown (unknown)\n")
        assert "Subject: Hi\n" in line
        assert line.endswith("ID: abc\n")

    def test_categories_hidden_by_default(self):
        msg = {"id": "abc", "categories": ["Red"]}
        assert "[Red]" not in format_email_line(msg, 1)


class TestBodyText:
    """Tests for html_to_text and extract_body_text."""

    def test_html_to_text(self):
        assert html_to_text("<div>Line one</div><p>Line&amp;two</p>") == "Line one\nLine&two"

    def test_plain_body(self):
        msg = {"body": {"contentType": "text", "content": "  Hello  "}}
        assert extract_body_text(msg) == "Hello"

    def test_missing_body(self):
        assert extract_body_text({}) == ""
