import pytest

from dbinitializer.errors_catalog import actionable_error


def test_actionable_error_formats_message_with_suggested_action():
    message = actionable_error("location_not_found", location="db/schema.sql")

    assert "No scripts found for location `db/schema.sql`." in message
    assert "Suggested action:" in message


def test_actionable_error_rejects_unknown_code():
    with pytest.raises(KeyError, match="Unknown error catalog key"):
        actionable_error("nope")
