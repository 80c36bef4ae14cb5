"""Character entity decoding for feed text and rendered output."""

import re

NAMED_ENTITIES = {
    "amp": "&",
    "lt": "<",
    "gt": ">",
    "quot": '"',
    "apos": "'",
    "nbsp": " ",
    "ndash": "–",
    "mdash": "—",
    "lsquo": "'",
    "rsquo": "'",
    "ldquo": '"',
    "rdquo": '"',
    "hellip": "...",
    "copy": "©",
    "reg": "®",
    "trade": "™",
}

# One scan over the text: named alternatives come first, and the output of a
# substitution is never rescanned, so "&amp;#39;" becomes "&#39;".
_ENTITY_RE = re.compile(
    r"&(?:(?P<named>" + "|".join(NAMED_ENTITIES) + r")"
    r"|#(?P<dec>\d+)"
    r"|#[xX](?P<hex>[0-9a-fA-F]+));",
    re.IGNORECASE,
)


def _codepoint(value: int, original: str) -> str:
    try:
        return chr(value)
    except (ValueError, OverflowError):
        return original


def _replace(match: re.Match) -> str:
    named = match.group("named")
    if named is not None:
        return NAMED_ENTITIES[named.lower()]
    dec = match.group("dec")
    if dec is not None:
        return _codepoint(int(dec), match.group(0))
    return _codepoint(int(match.group("hex"), 16), match.group(0))


def decode_entities(text: str) -> str:
    """Decode named, decimal and hexadecimal character entities.

    Unknown entities are left untouched and the function never raises.

    Args:
        text: Text fragment possibly containing entities

    Returns:
        Decoded text, or the input unchanged when it is empty
    """
    if not text:
        return text
    return _ENTITY_RE.sub(_replace, text)
