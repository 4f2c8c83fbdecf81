"""
Turn raw step errors into messages a page author can act on.

Compiler and renderer errors arrive as free text; known MDX/JSX failure patterns
are rewritten into explanations and, where a source location can be recovered
from the text, pointed at the offending page.
"""

from __future__ import annotations

import re
import traceback
from dataclasses import dataclass
from typing import Callable, Optional

from sitebuild.core import ConflictError


@dataclass(slots=True)
class SourceLocation:
    file_path: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None
    line_text: Optional[str] = None
    jsx_element: Optional[str] = None
    line_applies_to_source: bool = False
    render_entry_path: Optional[str] = None
    render_entry_line: Optional[int] = None

    def is_empty(self) -> bool:
        return not (
            self.file_path
            or self.line is not None
            or self.line_text
            or self.jsx_element
        )


_RENDER_FAILED_RE = re.compile(r"Failed to render\s+([^\n:]+\.(?:mdx|md))\s*:")
_SOURCE_POS_RE = re.compile(r"([^\s:]+\.(?:mdx|md)):(\d+):(\d+)")
_LINE_TEXT_RE = re.compile(r"\n\s*(\d+)\s*\|\s*(.+)$", re.MULTILINE)
_RENDER_ENTRY_RE = re.compile(r"Render entry:\s*([^\s:]+)(?::(\d+))?")
_COMPILED_DIR_RE = re.compile(r"(?:server-compiled|client-compiled)[\\/](.+?)[\\/]index\.js")
_TAG_IN_LINE_RE = re.compile(r"</?([A-Za-z][\w.-]*)\b")
_CLOSING_TAG_RE = re.compile(
    r"Expected corresponding JSX closing tag for <([A-Za-z][\w.-]*)>"
)
_RENDER_METHOD_RE = re.compile(r"Check the render method of `([^`]+)`")
_ADDITIONAL_ERRORS_RE = re.compile(r"\n\s*Additional render errors \(\d+\):[\s\S]*$")


def _error_text(error: BaseException | str) -> str:
    if isinstance(error, BaseException):
        parts = [str(error)]
        if error.__traceback__ is not None:
            parts.append("".join(traceback.format_tb(error.__traceback__)))
        return "\n".join(p for p in parts if p)
    return error


def extract_source_location(error: BaseException | str) -> SourceLocation | None:
    """Best-effort recovery of file/line/element information from an error."""
    text = _error_text(error)
    loc = SourceLocation()

    m = _RENDER_FAILED_RE.search(text)
    if m:
        loc.file_path = m.group(1)

    m = _SOURCE_POS_RE.search(text)
    if m:
        loc.file_path = loc.file_path or m.group(1)
        loc.line = int(m.group(2))
        loc.column = int(m.group(3))
        loc.line_applies_to_source = True

    m = _LINE_TEXT_RE.search(text)
    if m:
        if loc.line is None:
            loc.line = int(m.group(1))
        loc.line_text = m.group(2).rstrip()

    m = _RENDER_ENTRY_RE.search(text)
    if m:
        loc.render_entry_path = m.group(1)
        if m.group(2):
            loc.render_entry_line = int(m.group(2))
            if loc.line is None:
                loc.line = loc.render_entry_line

    m = _COMPILED_DIR_RE.search(text)
    if m and not loc.file_path:
        loc.file_path = f"pages/{m.group(1)}.mdx"

    if not loc.jsx_element and loc.line_text:
        m = _TAG_IN_LINE_RE.search(loc.line_text)
        if m:
            loc.jsx_element = f"<{m.group(1)}>"

    if not loc.jsx_element:
        m = _CLOSING_TAG_RE.search(text)
        if m:
            loc.jsx_element = f"<{m.group(1)}>"

    if not loc.jsx_element:
        m = _RENDER_METHOD_RE.search(text)
        if m:
            loc.jsx_element = m.group(1)

    # Anonymous line previews are only meaningful for MDX errors.
    if not loc.file_path and loc.line_text and not re.search("mdx", text, re.I):
        loc.line = None
        loc.line_text = None

    return None if loc.is_empty() else loc


def _line_suffix(loc: SourceLocation) -> str:
    if loc.line is None or not loc.line_applies_to_source:
        return ""
    suffix = f":{loc.line}"
    if loc.column is not None:
        suffix += f":{loc.column}"
    return suffix


def _source_reference(loc: SourceLocation | None) -> str:
    if loc is None or not loc.file_path:
        return ""
    return f" in {loc.file_path}{_line_suffix(loc)}"


def _source_details(loc: SourceLocation | None) -> str:
    if loc is None:
        return ""
    if loc.render_entry_path:
        line = f":{loc.render_entry_line}" if loc.render_entry_line is not None else ""
        preview = (
            f"\n  {loc.render_entry_line} | {loc.line_text}"
            if loc.render_entry_line is not None and loc.line_text
            else ""
        )
        return f"\n\n  Render entry: {loc.render_entry_path}{line}{preview}"
    if loc.line is None:
        return ""
    if loc.line_text:
        return f"\n\n  {loc.line} | {loc.line_text}"
    column = f", column {loc.column}" if loc.column is not None else ""
    return f"\n\n  Line {loc.line}{column}"


def _style_prop(_m: re.Match[str], loc: SourceLocation | None) -> str:
    return (
        f"MDX syntax error{_source_reference(loc)}:\n"
        '  HTML-style "style" attributes don\'t work in MDX.\n\n'
        '  Instead of:  <div style="color: red">\n'
        "  Use:         <div style={{color: 'red'}}>\n\n"
        "  MDX uses JSX syntax, so style must be an object." + _source_details(loc)
    )


def _class_attr(_m: re.Match[str], loc: SourceLocation | None) -> str:
    return (
        f"MDX syntax error{_source_reference(loc)}:\n"
        '  HTML-style "class" attributes don\'t work in MDX.\n\n'
        '  Instead of:  <div class="foo">\n'
        '  Use:         <div className="foo">\n\n'
        "  MDX uses JSX syntax, so use className instead of class."
        + _source_details(loc)
    )


def _invalid_element(_m: re.Match[str], loc: SourceLocation | None) -> str:
    hint = f" ({loc.jsx_element})" if loc is not None and loc.jsx_element else ""
    return (
        f"MDX syntax error{_source_reference(loc)}:\n"
        f"  A JSX element couldn't be rendered{hint}. Common causes:\n\n"
        "  1. Unclosed HTML tag - use self-closing syntax:\n"
        '     Instead of:  <img src="...">\n'
        '     Use:         <img src="..." />\n\n'
        "  2. Missing component - check the component name is correct\n"
        "     and the file exists in src/ or pages/" + _source_details(loc)
    )


def _unclosed_tag(m: re.Match[str], loc: SourceLocation | None) -> str:
    tag = m.group(1)
    return (
        f"MDX syntax error{_source_reference(loc)}:\n"
        f"  Unclosed <{tag}> tag.\n\n"
        f"  Either close it: <{tag}>...</{tag}>\n"
        f"  Or self-close:   <{tag} />" + _source_details(loc)
    )


def _unexpected_token(_m: re.Match[str], loc: SourceLocation | None) -> str:
    return (
        f"MDX syntax error{_source_reference(loc)}:\n"
        "  Invalid JSX syntax. Check for:\n"
        "  - Unclosed tags (use <img /> not <img>)\n"
        "  - HTML attributes (use className not class)\n"
        '  - Style attributes (use style={{}} not style="")' + _source_details(loc)
    )


ERROR_PATTERNS: list[
    tuple[re.Pattern[str], Callable[[re.Match[str], Optional[SourceLocation]], str]]
] = [
    (
        re.compile(
            r"The `style` prop expects a mapping from style properties to values, not a string"
        ),
        _style_prop,
    ),
    (re.compile(r"Invalid DOM property `class`\. Did you mean `className`\?"), _class_attr),
    (
        re.compile(r"Element type is invalid: expected a string.*but got: (undefined|object)"),
        _invalid_element,
    ),
    (re.compile(r"Expected corresponding JSX closing tag for <(\w+)>"), _unclosed_tag),
    (re.compile(r"Unexpected token"), _unexpected_token),
]


def format_build_error(error: BaseException | str) -> str:
    """
    Message shown to the user for a failed build. Conflict reports and messages
    without a recognizable pattern or location are returned unchanged.
    """
    if isinstance(error, ConflictError):
        return str(error)

    message = str(error)
    loc = extract_source_location(error)

    m = _ADDITIONAL_ERRORS_RE.search(message)
    additional = f"\n\n{m.group(0).lstrip()}" if m else ""

    for pattern, render in ERROR_PATTERNS:
        match = pattern.search(message)
        if match:
            return render(match, loc) + additional

    if loc is not None and loc.file_path:
        at_ref = f"{loc.file_path}{_line_suffix(loc)}"
        if f"\n  at {at_ref}" in message:
            return message
        if loc.line_text and loc.line is not None:
            return f"{message}\n  at {at_ref}:\n  {loc.line} | {loc.line_text}"
        return f"{message}\n  at {at_ref}"

    if loc is not None and loc.line is not None and loc.line_text:
        return f"{message}\n  {loc.line} | {loc.line_text}"

    return message
