# test_formatting.py
from xano_mcp.tools.formatting import (
    field_line,
    format_timestamp,
    items_of,
    page_line,
    render_sections,
    schema_to_markdown,
    swagger_to_markdown,
)

SAMPLE_SWAGGER = {
    "openapi": "3.0.0",
    "info": {"title": "Members API", "version": "0.0.1"},
    "servers": [{"url": "https://x8ki-letl-twmt.n7.xano.io/api:members"}],
    "paths": {
        "/members/{id}": {
            "get": {
                "summary": "Get one member",
                "parameters": [
                    {"name": "id", "in": "path", "required": True, "schema": {"type": "integer"}},
                ],
            },
            "parameters": [{"name": "ignored"}],
        },
        "/members": {
            "post": {"summary": "Add a member"},
        },
    },
    "components": {"securitySchemes": {"bearerAuth": {"type": "http", "scheme": "bearer"}}},
}


class TestFormatTimestamp:

    def test_epoch_milliseconds(self):
        assert format_timestamp(1700000000000) == "2023-11-14 22:13:20 UTC"

    def test_iso_string_is_normalized_to_utc(self):
        assert format_timestamp("2024-03-01T10:00:00+02:00") == "2024-03-01 08:00:00 UTC"
        assert format_timestamp("2024-03-01T10:00:00Z") == "2024-03-01 10:00:00 UTC"

    def test_missing(self):
        assert format_timestamp(None) == "N/A"
        assert format_timestamp("") == "N/A"

    def test_unparseable_string_is_returned_as_is(self):
        assert format_timestamp("yesterday") == "yesterday"

    def test_out_of_range_epoch_is_returned_as_text(self):
        assert format_timestamp(10 ** 20) == str(10 ** 20)
        assert format_timestamp(float("inf")) == "inf"


def test_field_line():
    assert field_line("Tags", ["a", "b"]) == "**Tags**: a, b\n"
    assert field_line("Docs", None) == ""
    assert field_line("Description", "", "No description") == "**Description**: No description\n"


def test_page_line():
    assert page_line({"curPage": 2, "nextPage": 3, "prevPage": 1}) == "Page 2 (Next: 3) (Prev: 1)"
    assert page_line({"curPage": 1, "nextPage": None}) == "Page 1"


def test_items_of():
    assert items_of([{"id": 1}]) == [{"id": 1}]
    assert items_of({"items": [{"id": 2}], "curPage": 1}) == [{"id": 2}]
    assert items_of(None) == []


def test_render_sections():
    text = render_sections("Title", ["## a", "## b"], "Page 1")

    assert text == "# Title\n\nPage 1\n\n## a\n\n## b"


def test_schema_to_markdown():
    schema = [
        {"name": "email", "type": "email", "required": True, "nullable": False,
         "access": "private", "style": "single", "default": "a@b.c"},
    ]

    text = schema_to_markdown("12", schema)

    assert text.startswith("# Schema for Table ID: 12\n\n")
    assert "## email (email)" in text
    assert "**Required**: Yes" in text
    assert "**Access**: private" in text
    assert "**Default**: a@b.c" in text


def test_schema_to_markdown_unexpected_shape():
    assert "Unexpected schema format" in schema_to_markdown("1", {"oops": True})


class TestSwaggerToMarkdown:
    """Swagger 压缩为 Markdown"""

    def test_sections(self):
        text = swagger_to_markdown(SAMPLE_SWAGGER, "Members")

        assert text.startswith("# Members API\n")
        assert "- Title: Members API" in text
        assert "- Version: 0.0.1" in text
        assert "- Base URL: https://x8ki-letl-twmt.n7.xano.io/api:members" in text
        assert "| 429 | Rate Limited |" in text
        assert "| id | path | Y | integer |" in text
        assert "- bearerAuth: http (bearer)" in text

    def test_endpoints_sorted_by_path(self):
        text = swagger_to_markdown(SAMPLE_SWAGGER, "Members")

        assert text.index("### POST /members\n") < text.index("### GET /members/{id}\n")
        assert "ignored" not in text

    def test_minimal_document(self):
        text = swagger_to_markdown({}, "Empty")

        assert "- Title: Empty" in text
        assert "- Version: N/A" in text
        assert "## Auth" not in text
        assert text.endswith("\n")
