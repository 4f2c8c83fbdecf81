from __future__ import annotations

from sitebuild.core import ConflictError
from sitebuild.output.conflicts import ConflictReport, UrlConflict
from sitebuild.pipeline import extract_source_location, format_build_error


def test_conflict_errors_pass_through_unchanged() -> None:
    report = ConflictReport(url_conflicts=(UrlConflict("/foo", ("foo.html", "foo/index.html")),))
    err = ConflictError(report)
    assert format_build_error(err) == report.format()


def test_plain_messages_are_unchanged() -> None:
    assert format_build_error("something broke") == "something broke"


def test_style_prop_hint_points_at_source() -> None:
    msg = (
        "Failed to render pages/about.mdx: The `style` prop expects a mapping "
        "from style properties to values, not a string."
    )
    out = format_build_error(msg)
    assert out.startswith("MDX syntax error in pages/about.mdx:")
    assert "style={{color: 'red'}}" in out


def test_class_attribute_hint() -> None:
    out = format_build_error(
        RuntimeError("Warning: Invalid DOM property `class`. Did you mean `className`?")
    )
    assert 'HTML-style "class" attributes' in out
    assert "className" in out


def test_unclosed_tag_with_position() -> None:
    msg = (
        "pages/docs/intro.mdx:12:5: Expected corresponding JSX closing tag for <div>\n"
        "  12 | <div>hello"
    )
    out = format_build_error(msg)
    assert out.startswith("MDX syntax error in pages/docs/intro.mdx:12:5:")
    assert "Unclosed <div> tag." in out
    assert "12 | <div>hello" in out


def test_additional_errors_are_kept() -> None:
    msg = (
        "Unexpected token in pages/a.mdx:3:1\n"
        "Additional render errors (1):\n  - pages/b.mdx failed"
    )
    out = format_build_error(msg)
    assert "Invalid JSX syntax" in out
    assert out.endswith("Additional render errors (1):\n  - pages/b.mdx failed")


def test_unknown_error_with_location_gets_reference() -> None:
    out = format_build_error("Something odd happened in pages/x.md:4:2")
    assert out == "Something odd happened in pages/x.md:4:2\n  at pages/x.md:4:2"


def test_extract_location_from_compiled_module_path() -> None:
    loc = extract_source_location(
        "TypeError: x is undefined\n    at /tmp/.sitebuild/server-compiled/blog/post/index.js:10:3"
    )
    assert loc is not None
    assert loc.file_path == "pages/blog/post.mdx"

    assert extract_source_location("no location here") is None
