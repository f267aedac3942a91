import re

_BUSINESS_SUFFIXES = re.compile(r"\b(llc|inc|corp|ltd|co|company)\b")
_LEADING_NOISE = re.compile(r"^[\d\s\-#]+")
_WHITESPACE = re.compile(r"\s+")


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def normalize_description(description: str | None, strip_noise: bool = True) -> str:
    """
    Case-fold, trim and collapse whitespace.

    With ``strip_noise`` the company suffixes (LLC, Inc, Co, ...) and any
    leading store number such as ``"#0412 - "`` are removed as well, so
    ``"0412 Shell Oil Co"`` and ``"shell oil"`` normalize to the same text.
    Descriptions made only of noise (a bare check number like ``"1002"``)
    are kept as plain normalized text rather than reduced to ``""``.
    """
    text = collapse_whitespace((description or "").casefold())
    if not strip_noise:
        return text
    stripped = _BUSINESS_SUFFIXES.sub("", text)
    stripped = collapse_whitespace(_LEADING_NOISE.sub("", stripped))
    return stripped or text
