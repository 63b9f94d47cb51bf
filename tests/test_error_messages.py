from glint.error_messages import (
    ERROR_MESSAGES_PLAIN_TEXT,
    ERROR_MESSAGES_REGEXES,
    error_message_patterns,
    find_error_messages,
)


def test_every_regex_compiles():
    patterns = error_message_patterns()
    assert [p.pattern for p in patterns] == list(ERROR_MESSAGES_REGEXES)


def test_patterns_are_cached():
    first = error_message_patterns()
    second = error_message_patterns()
    assert len(second) == len(ERROR_MESSAGES_REGEXES)
    assert all(a is b for a, b in zip(first, second))


def test_plain_text_signature_found():
    page = "<html><body>You have an error in your SQL syntax near x</body></html>"
    assert "You have an error in your SQL syntax" in find_error_messages(page)


def test_oracle_error_found_by_regex():
    page = "ORA-01756: quoted string not properly terminated"
    assert "ORA-01756: " in find_error_messages(page)


def test_clean_page_has_no_findings():
    assert find_error_messages("<html><body>hello world</body></html>") == []


def test_findings_are_unique():
    page = "Error Occurred While Processing Request"
    results = find_error_messages(page)
    assert results.count("Error Occurred While Processing Request") == 1


def test_every_plain_signature_detects_itself():
    for message in ERROR_MESSAGES_PLAIN_TEXT:
        assert message in find_error_messages("xx " + message + " yy")


def test_escaped_quote_kept_literally():
    results = find_error_messages("Can\\'t find record in table")
    assert "Can\\'t find record in" in results
    assert "Can't find record in" not in results