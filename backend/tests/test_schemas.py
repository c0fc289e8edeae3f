"""
CodeArchive Backend: Request Schema Tests
==========================================

What:  Field rules for snippet create/update bodies.
"""

import pytest
from pydantic import ValidationError

from codearchive.schemas.snippet import SnippetCreate, SnippetUpdate


def _create(**overrides):
    body = {"title": "Auth guard", "language": "JavaScript", "code": "export const x=1;"}
    body.update(overrides)
    return SnippetCreate(**body)


class TestSnippetCreate:

    def test_valid_body_defaults_version(self):
        snippet = _create()
        assert snippet.version == 1
        assert snippet.author is None
        assert snippet.language == "JavaScript"

    def test_title_too_short(self):
        with pytest.raises(ValidationError) as exc_info:
            _create(title="abc")
        assert exc_info.value.errors()[0]["loc"] == ("title",)

    def test_title_is_trimmed_before_length_check(self):
        assert _create(title="   abcd   ").title == "abcd"
        with pytest.raises(ValidationError):
            _create(title="   abc   ")

    def test_title_too_long(self):
        with pytest.raises(ValidationError):
            _create(title="x" * 41)

    def test_code_length_bounds(self):
        with pytest.raises(ValidationError):
            _create(code="12345")
        with pytest.raises(ValidationError):
            _create(code="x" * 5001)
        assert _create(code="123456").code == "123456"

    def test_code_is_not_trimmed(self):
        assert _create(code="  x = 1  ").code == "  x = 1  "

    def test_unknown_language_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            _create(language="Ruby")
        assert exc_info.value.errors()[0]["loc"] == ("language",)

    def test_language_whitespace_tolerated(self):
        assert _create(language=" Python ").language == "Python"

    @pytest.mark.parametrize("version", [0, 1000, -1])
    def test_version_out_of_range(self, version):
        with pytest.raises(ValidationError):
            _create(version=version)

    def test_missing_required_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            SnippetCreate()
        missing = {err["loc"][0] for err in exc_info.value.errors()}
        assert missing == {"title", "language", "code"}

    def test_server_fields_ignored(self):
        snippet = _create(id="abc", createdAt="2020-01-01T00:00:00Z")
        assert "id" not in snippet.model_dump()


class TestSnippetUpdate:

    def test_changes_only_include_sent_fields(self):
        assert SnippetUpdate(version=2).changes() == {"version": 2}
        assert SnippetUpdate().changes() == {}

    def test_same_rules_as_create(self):
        with pytest.raises(ValidationError):
            SnippetUpdate(title="abc")
        with pytest.raises(ValidationError):
            SnippetUpdate(language="Ruby")
        with pytest.raises(ValidationError):
            SnippetUpdate(code="12345")

    @pytest.mark.parametrize("field", ["title", "language", "code", "version"])
    def test_required_fields_cannot_be_nulled(self, field):
        with pytest.raises(ValidationError):
            SnippetUpdate(**{field: None})

    def test_author_can_be_nulled(self):
        assert SnippetUpdate(author=None).changes() == {"author": None}

    def test_language_stored_as_plain_string(self):
        changes = SnippetUpdate(language=" Markdown ").changes()
        assert changes == {"language": "Markdown"}
        assert type(changes["language"]) is str
