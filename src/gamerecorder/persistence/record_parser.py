"""Record parser — best-effort decoding of recording log lines.

This is deliberately not a JSON parser.  It understands exactly the
grammar produced by ``persistence.encoder``:

- a scalar field is the text after ``"key":`` up to the next comma or
  closing brace;
- an array field is the text between ``[`` and its matching ``]``;
- array elements are split on commas outside ``{...}``.

Malformed input never raises: numbers fall back to ``0.0``, missing
fields to defaults, and unknown record types to ``None``.
"""

from __future__ import annotations

from typing import Union

from gamerecorder.models.entity import (
    DEFAULT_COLOR,
    Color,
    EntityEntry,
    HeaderRecord,
    InputRecord,
    KeyframeRecord,
    RenderDescriptor,
    ShapeKind,
)

Record = Union[HeaderRecord, InputRecord, KeyframeRecord]


# ===================================================================
# Scanner primitives
# ===================================================================


def field(text: str, key: str) -> str | None:
    """Raw value of ``key`` (quotes kept), or None when the key is absent."""
    i = text.find(f'"{key}"')
    if i < 0:
        return None
    c = text.find(":", i)
    if c < 0:
        return None
    start = c + 1
    ends = [j for j in (text.find(",", start), text.find("}", start)) if j >= 0]
    end = min(ends) if ends else len(text)
    return text[start:end].strip()


def strip_quotes(s: str | None) -> str | None:
    if s is None:
        return None
    s = s.strip()
    if len(s) >= 2 and s.startswith('"') and s.endswith('"'):
        return s[1:-1]
    return s


def parse_float(s: str | None) -> float:
    """Numeric value of a field; ``0.0`` for anything unparsable."""
    if s is None:
        return 0.0
    try:
        return float(strip_quotes(s))
    except (TypeError, ValueError):
        return 0.0


def parse_int(s: str | None) -> int:
    """Integer value of a field; ``0`` when unparsable, infinite or NaN."""
    try:
        return int(parse_float(s))
    except (OverflowError, ValueError):
        return 0


def extract_array(text: str, start: int) -> str:
    """Contents between the ``[`` at ``start`` and its matching ``]``.

    Returns an empty string when ``start`` is not a ``[`` or the bracket
    is never closed.
    """
    if start < 0 or start >= len(text) or text[start] != "[":
        return ""
    depth = 0
    for i in range(start, len(text)):
        ch = text[i]
        if ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
            if depth == 0:
                return text[start + 1:i]
    return ""


def array_field(text: str, key: str) -> str:
    """Contents of the array stored under ``key``; empty when absent."""
    i = text.find(f'"{key}"')
    if i < 0:
        return ""
    return extract_array(text, text.find("[", i))


def split_top_level(arr: str) -> list[str]:
    """Split array contents on commas that are not inside ``{...}``."""
    out: list[str] = []
    depth = 0
    start = 0
    for i, ch in enumerate(arr):
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
        elif ch == "," and depth == 0:
            out.append(arr[start:i])
            start = i + 1
    if start < len(arr):
        out.append(arr[start:])
    return [s.strip() for s in out if s.strip()]


# ===================================================================
# Records
# ===================================================================


def record_type(line: str) -> str | None:
    return strip_quotes(field(line, "type"))


def parse_record(line: str) -> Record | None:
    """Decode one log line.  Unknown or missing types yield None."""
    kind = record_type(line)
    if kind == "header":
        return parse_header(line)
    if kind == "input":
        return parse_input(line)
    if kind == "keyframe":
        return parse_keyframe(line)
    return None


def parse_header(line: str) -> HeaderRecord:
    return HeaderRecord(
        version=parse_int(field(line, "version")),
        width=parse_int(field(line, "w")),
        height=parse_int(field(line, "h")),
    )


def parse_input(line: str) -> InputRecord:
    keys = tuple(parse_int(k) for k in split_top_level(array_field(line, "keys")))
    return InputRecord(t=parse_float(field(line, "t")), keys=keys)


def parse_keyframe(line: str) -> KeyframeRecord:
    kf = KeyframeRecord(t=parse_float(field(line, "t")))
    for part in split_top_level(array_field(line, "entities")):
        kf.entities.append(parse_entity(part))
    return kf


def parse_entity(fragment: str) -> EntityEntry:
    """Decode one ``{...}`` element of a keyframe's entity array.

    Logs without a ``name`` field fall back to the id.  A ``CUSTOM``
    marker without a size means the entity has no generic shape.
    """
    entity_id = strip_quotes(field(fragment, "id")) or ""
    name = strip_quotes(field(fragment, "name")) or entity_id
    return EntityEntry(
        id=entity_id,
        name=name,
        x=parse_float(field(fragment, "x")),
        y=parse_float(field(fragment, "y")),
        render=_parse_render(fragment),
    )


def _parse_render(fragment: str) -> RenderDescriptor | None:
    rt = strip_quotes(field(fragment, "rt"))
    if rt is None:
        return None
    kind = ShapeKind.parse(rt)
    width = field(fragment, "w")
    if kind is ShapeKind.CUSTOM and width is None:
        return None
    return RenderDescriptor(
        kind=kind,
        width=parse_float(width),
        height=parse_float(field(fragment, "h")),
        color=_parse_color(fragment),
    )


def _parse_color(fragment: str) -> Color:
    rgba = [parse_float(v) for v in array_field(fragment, "color").split(",") if v.strip()]
    if len(rgba) < 4:
        return DEFAULT_COLOR
    return Color(*rgba[:4])
