"""Rails-compatible string inflection.

Generated Ruby code has to agree with what ActiveSupport would produce for the
same names (``Models::User`` -> ``users`` -> ``Users``), so the rules below
follow ActiveSupport's English inflections rather than a generic library.
"""

from __future__ import annotations

import re

# (pattern, replacement) pairs, most specific first.
_PLURALS: list[tuple[str, str]] = [
    (r"(quiz)$", r"\1zes"),
    (r"^(oxen)$", r"\1"),
    (r"^(ox)$", r"\1en"),
    (r"^(m|l)ice$", r"\1ice"),
    (r"^(m|l)ouse$", r"\1ice"),
    (r"(matr|vert|ind)(?:ix|ex)$", r"\1ices"),
    (r"(x|ch|ss|sh)$", r"\1es"),
    (r"([^aeiouy]|qu)y$", r"\1ies"),
    (r"(hive)$", r"\1s"),
    (r"(?:([^f])fe|([lr])f)$", r"\1\2ves"),
    (r"sis$", "ses"),
    (r"([ti])a$", r"\1a"),
    (r"([ti])um$", r"\1a"),
    (r"(buffal|tomat)o$", r"\1oes"),
    (r"(bu)s$", r"\1ses"),
    (r"(alias|status)$", r"\1es"),
    (r"(octop|vir)i$", r"\1i"),
    (r"(octop|vir)us$", r"\1i"),
    (r"^(ax|test)is$", r"\1es"),
    (r"s$", "s"),
    (r"$", "s"),
]

_SINGULARS: list[tuple[str, str]] = [
    (r"(database)s$", r"\1"),
    (r"(quiz)zes$", r"\1"),
    (r"(matr)ices$", r"\1ix"),
    (r"(vert|ind)ices$", r"\1ex"),
    (r"^(ox)en", r"\1"),
    (r"(alias|status)(es)?$", r"\1"),
    (r"(octop|vir)(us|i)$", r"\1us"),
    (r"^(a)x[ie]s$", r"\1xis"),
    (r"(cris|test)(is|es)$", r"\1is"),
    (r"(shoe)s$", r"\1"),
    (r"(o)es$", r"\1"),
    (r"(bus)(es)?$", r"\1"),
    (r"^(m|l)ice$", r"\1ouse"),
    (r"(x|ch|ss|sh)es$", r"\1"),
    (r"(m)ovies$", r"\1ovie"),
    (r"(s)eries$", r"\1eries"),
    (r"([^aeiouy]|qu)ies$", r"\1y"),
    (r"([lr])ves$", r"\1f"),
    (r"(tive)s$", r"\1"),
    (r"(hive)s$", r"\1"),
    (r"([^f])ves$", r"\1fe"),
    (r"((a)naly|(b)a|(d)iagno|(p)arenthe|(p)rogno|(s)ynop|(t)he)(sis|ses)$", r"\1sis"),
    (r"([ti])a$", r"\1um"),
    (r"(n)ews$", r"\1ews"),
    (r"(ss)$", r"\1"),
    (r"s$", ""),
]

_IRREGULARS: dict[str, str] = {
    "person": "people",
    "man": "men",
    "child": "children",
    "sex": "sexes",
    "move": "moves",
    "zombie": "zombies",
}

_UNCOUNTABLES = frozenset(
    {
        "equipment",
        "information",
        "rice",
        "money",
        "species",
        "series",
        "fish",
        "sheep",
        "jeans",
        "police",
        "news",
    }
)


def _apply(word: str, rules: list[tuple[str, str]], irregulars: dict[str, str]) -> str:
    if not word:
        return word
    # Only the last word of "some_compound_word" inflects.
    match = re.match(r"^(.*?)([A-Za-z]+)$", word)
    if not match:
        return word
    prefix, last = match.groups()
    lower = last.lower()
    if lower in _UNCOUNTABLES:
        return word
    if lower in irregulars:
        replacement = irregulars[lower]
        if last[0].isupper():
            replacement = replacement[0].upper() + replacement[1:]
        return prefix + replacement
    for pattern, replacement in rules:
        if re.search(pattern, last, flags=re.IGNORECASE):
            return prefix + re.sub(pattern, replacement, last, count=1, flags=re.IGNORECASE)
    return word


def pluralize(word: str) -> str:
    """``user`` -> ``users``, ``category`` -> ``categories``, ``person`` -> ``people``."""
    return _apply(word, _PLURALS, _IRREGULARS)


def singularize(word: str) -> str:
    """``users`` -> ``user``, ``media`` -> ``medium``, ``addresses`` -> ``address``."""
    return _apply(word, _SINGULARS, {v: k for k, v in _IRREGULARS.items()})


def is_singular(word: str) -> bool:
    """Return ``True`` when singularizing *word* leaves it unchanged.

    Uncountable words count as singular; Latin plurals such as ``data`` and
    ``media`` do not.
    """
    return singularize(word) == word


def camelize(term: str) -> str:
    """``admin/user_profile`` -> ``Admin::UserProfile``."""
    parts = []
    for segment in term.split("/"):
        parts.append("".join(piece[:1].upper() + piece[1:] for piece in segment.split("_")))
    return "::".join(parts)


def underscore(term: str) -> str:
    """``Admin::UserProfile`` -> ``admin/user_profile``."""
    word = term.replace("::", "/")
    word = re.sub(r"([A-Z\d]+)([A-Z][a-z])", r"\1_\2", word)
    word = re.sub(r"([a-z\d])([A-Z])", r"\1_\2", word)
    word = word.replace("-", "_")
    return word.lower()


def demodulize(path: str) -> str:
    """``Models::Admin::User`` -> ``User``."""
    return path.rsplit("::", 1)[-1]


def tableize(class_name: str) -> str:
    """``UserProfile`` -> ``user_profiles``."""
    return pluralize(underscore(class_name))


def humanize(word: str) -> str:
    """``author_id`` -> ``Author``, ``created_at`` -> ``Created at``."""
    result = re.sub(r"_id$", "", word).replace("_", " ").strip()
    return result[:1].upper() + result[1:]
