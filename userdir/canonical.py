"""
Normalization of raw registration input.

Cosmetically different e-mail addresses can resolve to the same mailbox
(``j.doe+spam@gmail.com`` and ``jdoe@gmail.com``, for example). Duplicate
detection works on the canonical form produced here, so that such variants
cannot be used to register several accounts against one mailbox.
"""

from typing import Optional
import re
import unicodedata

EMAIL_REGEX = re.compile(
    r'^(([^<>()\[\]\\.,;:\s@"]+(\.[^<>()\[\]\\.,;:\s@"]+)*)|(".+"))'
    r'@((\[[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\])|'
    r'(([a-zA-Z\-0-9]+\.)+[a-zA-Z]{2,}))$'
)
"""Address grammar. Group 1 is the local part, group 5 the domain."""

DOT_INSENSITIVE_DOMAINS = {
    'gmail.com': 'gmail.com',
    'googlemail.com': 'gmail.com',
}
"""
Free-mail domains that ignore dots in the local part and discard anything
after a ``+``, mapped to the domain used in the canonical form.
"""

_STRIPPED_CATEGORIES = frozenset(['Cc', 'Cf', 'Zl', 'Zp'])
_JOINERS = frozenset(['\u200c', '\u200d'])
_TAG_SUFFIX = re.compile(r'[.]|(\+.*)')


def sanitize_username(raw: str) -> str:
    """
    Remove non-printing characters from a username.

    Control characters (backspace, newline, ...), format characters (zero
    width spaces, bidi overrides, ...), and line/paragraph separators are
    removed, along with surrounding whitespace. Zero width joiners and
    non-joiners are kept between two visible characters, where they shape
    emoji sequences and scripts such as Arabic or Devanagari. Visible
    characters are left exactly as they are. Length is not checked here.
    """
    kept = [char for char in raw if char in _JOINERS
            or unicodedata.category(char) not in _STRIPPED_CATEGORIES]
    cleaned = ''.join(
        char for i, char in enumerate(kept)
        if char not in _JOINERS
        or (0 < i < len(kept) - 1
            and _is_visible(kept[i - 1]) and _is_visible(kept[i + 1]))
    )
    return cleaned.strip()


def _is_visible(char: str) -> bool:
    return char not in _JOINERS and not char.isspace()


def is_valid_email(raw: str) -> bool:
    """Whether ``raw`` matches the address grammar."""
    return EMAIL_REGEX.match(raw) is not None


def canonicalize_email(raw: str) -> Optional[str]:
    """
    Get the canonical form of an e-mail address.

    Parameters
    ----------
    raw : str
        The address as submitted.

    Returns
    -------
    str or None
        For a dot-insensitive free-mail domain, the lower-cased local part
        with dots and any ``+suffix`` removed, at the canonical domain. For
        any other domain, ``raw`` unchanged. ``None`` if ``raw`` is not a
        valid address.

    """
    match = EMAIL_REGEX.match(raw)
    if match is None:
        return None
    local, domain = match.group(1), match.group(5)

    canonical_domain = DOT_INSENSITIVE_DOMAINS.get(domain.lower())
    if canonical_domain is None:
        return raw

    local = _TAG_SUFFIX.sub('', local).lower()
    canonical = f'{local}@{canonical_domain}'
    # Stripping can leave nothing, or half of a quoted local part.
    if not local or not is_valid_email(canonical):
        return None
    return canonical
