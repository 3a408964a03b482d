import re

_TAG_RE = re.compile(r"<[^>]*>")
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def sanitize_string(v):
    """Strip markup and control characters from user-supplied text."""
    if not isinstance(v, str):
        return v
    v = _TAG_RE.sub("", v)
    v = _CONTROL_RE.sub("", v)
    return v.strip()
