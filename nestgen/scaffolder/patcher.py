"""Text patches for generated TypeScript sources.

Only two kinds of edit are supported, both anchored on well-known spots of a
Nest module file:

* prepending import statements to the top of the file, and
* appending entries to a ``<keyword>: [ ... ]`` array literal such as
  ``imports`` or ``providers``.

Everything outside the inserted text is preserved byte for byte.  This is a
text splice, not a parser: if a file contains two blocks with the same
keyword, the first one is patched.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from nestgen.errors import PatchError, PatchFailure

_QUOTES = "'\"`"


@dataclass(frozen=True)
class PatchSpec:
    """One combined edit of a source file: array entries plus their imports."""

    block_keyword: str
    entries: tuple[str, ...]
    import_text: str = ""


def patch_imports(source: str, import_text: str) -> str:
    """Prepend *import_text* and a newline to *source*.

    Not idempotent: applying the same imports twice duplicates them.
    """
    return f"{import_text}\n{source}"


def find_array_block(source: str, keyword: str) -> tuple[int, int]:
    """Locate the first ``<keyword>: [`` block in *source*.

    Returns:
        ``(open_index, close_index)`` -- the positions of the opening ``[``
        and of its matching ``]``.

    Raises:
        PatchError: ``ANCHOR_NOT_FOUND`` if there is no such block,
            ``UNBALANCED_BLOCK`` if the bracket is never closed.
    """
    pattern = re.compile(rf"(?<![\w$.]){re.escape(keyword)}\s*:\s*\[")
    match = pattern.search(source)
    if match is None:
        raise PatchError(PatchFailure.ANCHOR_NOT_FOUND, keyword)

    open_index = match.end() - 1
    close_index = _matching_bracket(source, open_index)
    if close_index < 0:
        raise PatchError(PatchFailure.UNBALANCED_BLOCK, keyword)
    return open_index, close_index


def _matching_bracket(source: str, open_index: int) -> int:
    """Index of the ``]`` closing the ``[`` at *open_index*, or -1.

    String literals and comments are skipped so brackets inside them do not
    count.
    """
    depth = 0
    i = open_index
    length = len(source)
    while i < length:
        char = source[i]
        if char in _QUOTES:
            i = _skip_string(source, i)
            continue
        if source.startswith("//", i):
            newline = source.find("\n", i)
            i = length if newline < 0 else newline
            continue
        if source.startswith("/*", i):
            end = source.find("*/", i + 2)
            i = length if end < 0 else end + 2
            continue
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1


def _skip_string(source: str, start: int) -> int:
    quote = source[start]
    i = start + 1
    while i < len(source):
        if source[i] == "\\":
            i += 2
            continue
        if source[i] == quote:
            return i + 1
        i += 1
    return len(source)


def _last_code_index(text: str) -> int:
    """Index of the last character of *text* outside comments and whitespace, or -1."""
    last = -1
    i = 0
    length = len(text)
    while i < length:
        char = text[i]
        if char in _QUOTES:
            i = _skip_string(text, i)
            last = i - 1
            continue
        if text.startswith("//", i):
            newline = text.find("\n", i)
            i = length if newline < 0 else newline
            continue
        if text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = length if end < 0 else end + 2
            continue
        if not char.isspace():
            last = i
        i += 1
    return last


def patch_array_block(source: str, keyword: str, insertion_text: str) -> str:
    """Splice *insertion_text* right before the closing ``]`` of the keyword block.

    The existing array contents are left untouched.  Raises ``PatchError``
    without producing any output when the block cannot be found.
    """
    _, close_index = find_array_block(source, keyword)
    return source[:close_index] + insertion_text + source[close_index:]


def array_insertion_text(
    contents: str,
    entries: Sequence[str],
    indent: str = "    ",
    closing_indent: str = "  ",
) -> str:
    """Build the text that appends *entries* to an array whose body is *contents*.

    A separating comma is emitted only when the array already has entries and
    its last code character (ignoring trailing comments) is not a comma, so the
    result never contains an empty slot.  Each entry goes on its own line
    followed by a comma.
    """
    if not entries:
        return ""
    body = contents.rstrip()
    trailing = contents[len(body):]
    last = _last_code_index(body)
    comma = "," if last >= 0 and body[last] != "," else ""

    if "\n" in trailing:
        # The bracket already sits on its own line; reuse that line.
        closing = trailing.rsplit("\n", 1)[1]
        pad = indent[len(closing):] if indent.startswith(closing) else ""
        lines = f",\n{indent}".join(entries)
        return f"{comma}{pad}{lines},\n{closing}"

    lines = "".join(f"\n{indent}{entry}," for entry in entries)
    return f"{comma}{lines}\n{closing_indent}"


def _line_indent(source: str, index: int) -> str:
    line_start = source.rfind("\n", 0, index) + 1
    line = source[line_start:index]
    return line[: len(line) - len(line.lstrip())]


def append_array_entries(source: str, keyword: str, entries: Sequence[str]) -> str:
    """Append *entries* to the first ``<keyword>: [...]`` array in *source*.

    Indentation follows the line the keyword sits on.
    """
    open_index, close_index = find_array_block(source, keyword)
    closing_indent = _line_indent(source, open_index)
    text = array_insertion_text(
        source[open_index + 1 : close_index],
        entries,
        indent=closing_indent + "  ",
        closing_indent=closing_indent,
    )
    return patch_array_block(source, keyword, text)


def apply_patch(source: str, spec: PatchSpec) -> str:
    """Apply *spec* to *source* as one text operation.

    The array is patched first, so a missing anchor raises before any import
    is added and the caller never sees a half-patched source.
    """
    patched = append_array_entries(source, spec.block_keyword, spec.entries)
    if spec.import_text:
        patched = patch_imports(patched, spec.import_text)
    return patched
