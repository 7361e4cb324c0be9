"""
ASCII Output

Escapes every non-printable or non-ASCII character as a ``\\uXXXX`` sequence
(surrogate pairs above U+FFFF) so generated bundles are plain 7-bit text.
Newlines and tabs are kept.
"""

_KEPT_CONTROLS = frozenset("\n\t")


def _is_printable_ascii(ch: str) -> bool:
    return " " <= ch <= "~" or ch in _KEPT_CONTROLS


def to_ascii(text: str) -> str:
    if all(_is_printable_ascii(ch) for ch in text):
        return text
    out = []
    for ch in text:
        code = ord(ch)
        if _is_printable_ascii(ch):
            out.append(ch)
        elif code > 0xFFFF:
            code -= 0x10000
            out.append(f"\\u{0xD800 + (code >> 10):04x}\\u{0xDC00 + (code & 0x3FF):04x}")
        else:
            out.append(f"\\u{code:04x}")
    return "".join(out)
