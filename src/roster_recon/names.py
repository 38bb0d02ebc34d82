"""Student name normalization and identity matching.

SIS exports write names as "Last, First Middle" while the classroom platform
uses "First Last". Both are reduced to a CanonicalName before comparison.
"""

import re

from roster_recon.models import CanonicalName

_WHITESPACE_RE = re.compile(r"\s+")


def collapse_whitespace(text: str | None) -> str:
    """Trim and collapse internal whitespace runs to a single space."""
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", text).strip()


def normalize(raw_name: str | None) -> CanonicalName:
    """Canonicalize a free-text person name.

    "Doe, John Michael" -> first="john", last="doe", full="john doe"
    (middle names dropped). "Mary Ann Van Dyke" -> first="mary",
    last="ann van dyke", full="mary ann van dyke". Never raises.
    """
    text = collapse_whitespace(raw_name).lower()
    if not text:
        return CanonicalName()

    if "," in text:
        last, _, rest = text.partition(",")
        last = last.strip()
        rest_tokens = rest.split()
        first = rest_tokens[0] if rest_tokens else ""
        full = " ".join(part for part in (first, last) if part)
        return CanonicalName(first=first, last=last, full=full)

    first, _, last = text.partition(" ")
    return CanonicalName(first=first, last=last, full=text)


def name_key(raw_name: str | None) -> str:
    """Dedup key for a name: its canonical full form."""
    return normalize(raw_name).full


def names_match(a: str | None, b: str | None, *, allow_swapped: bool = False) -> bool:
    """Decide whether two names refer to the same person.

    Rules, first hit wins:
      1. canonical full forms are equal
      2. both have 2+ tokens and the first and last tokens agree
         ("Doe, John" == "John Michael Doe")
      3. with allow_swapped, first/last are crossed ("Doe John" == "John Doe")

    Symmetric in a and b but not transitive.
    """
    n1 = normalize(a)
    n2 = normalize(b)

    if n1.full == n2.full:
        return True

    tokens1 = n1.full.split(" ")
    tokens2 = n2.full.split(" ")
    if len(tokens1) >= 2 and len(tokens2) >= 2:
        if tokens1[0] == tokens2[0] and tokens1[-1] == tokens2[-1]:
            return True

    if allow_swapped and n1.last and n2.last:
        if n1.first == n2.last and n1.last == n2.first:
            return True

    return False


def find_match(name: str, candidates: list[str], *, allow_swapped: bool = False) -> str | None:
    """Return the first candidate matching name, scanning in order."""
    for candidate in candidates:
        if names_match(name, candidate, allow_swapped=allow_swapped):
            return candidate
    return None
