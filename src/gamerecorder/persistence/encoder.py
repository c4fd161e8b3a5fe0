"""Quantized encoder — turns records into log lines.

The output looks like JSON but is a narrow, fixed grammar:

    {"type":"header","version":1,"w":800,"h":600}
    {"type":"input","t":1.25,"keys":[37,38]}
    {"type":"keyframe","t":0.50,"entities":[{"id":"Enemy_0",...}]}

Nothing is escaped.  Names and ids must not contain any of the
characters ``" , { } [ ]``.  Every number except header sizes and key
codes is written with exactly ``decimals`` fractional digits.
"""

from __future__ import annotations

from typing import Iterable

from gamerecorder.models.entity import EntityEntry, HeaderRecord

LOG_VERSION = 1


def quantize(value: float, decimals: int) -> str:
    """Fixed-precision, non-grouped decimal string (2 decimals: ``123.40``)."""
    return f"{value:.{max(0, decimals)}f}"


def encode_header(width: int, height: int, version: int = LOG_VERSION) -> str:
    return f'{{"type":"header","version":{version},"w":{int(width)},"h":{int(height)}}}'


def encode_header_record(header: HeaderRecord) -> str:
    return encode_header(header.width, header.height, header.version)


def encode_input(t: float, keys: Iterable[int], decimals: int) -> str:
    """Encode the keys pressed during one tick (sorted for stable output)."""
    joined = ",".join(str(int(k)) for k in sorted(keys))
    return f'{{"type":"input","t":{quantize(t, decimals)},"keys":[{joined}]}}'


def encode_entity(entry: EntityEntry, decimals: int) -> str:
    """Encode one keyframe entity.  Entities without a shape get ``"rt":"CUSTOM"``."""
    parts = [
        f'"id":"{entry.id}"',
        f'"name":"{entry.name}"',
        f'"x":{quantize(entry.x, decimals)}',
        f'"y":{quantize(entry.y, decimals)}',
    ]
    rd = entry.render
    if rd is not None:
        rgba = ",".join(quantize(v, decimals) for v in rd.color.as_tuple())
        parts += [
            f'"rt":"{rd.kind.value}"',
            f'"w":{quantize(rd.width, decimals)}',
            f'"h":{quantize(rd.height, decimals)}',
            f'"color":[{rgba}]',
        ]
    else:
        parts.append('"rt":"CUSTOM"')
    return "{" + ",".join(parts) + "}"


def encode_keyframe(t: float, entries: Iterable[EntityEntry], decimals: int) -> str:
    body = ",".join(encode_entity(e, decimals) for e in entries)
    return f'{{"type":"keyframe","t":{quantize(t, decimals)},"entities":[{body}]}}'
