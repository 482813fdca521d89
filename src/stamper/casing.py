"""Case conversions used for project names and template filters."""

from __future__ import annotations

import re

# Runs of letters and digits in any script
_CHUNK_RE = re.compile(r"[^\W_]+")


def _starts_word(chunk: str, i: int) -> bool:
    prev, cur = chunk[i - 1], chunk[i]
    if not cur.isupper():
        return False
    if prev.islower() or prev.isdigit():
        return True
    # End of an acronym: the last capital starts the next word
    return prev.isupper() and i + 1 < len(chunk) and chunk[i + 1].islower()


def split_words(text: str) -> list[str]:
    """Split text into words on separators and camel-case boundaries.

    >>> split_words("myHTTPServer_v2-app")
    ['my', 'HTTP', 'Server', 'v2', 'app']
    >>> split_words("Café Über")
    ['Café', 'Über']
    """
    words = []
    for chunk in _CHUNK_RE.findall(text):
        start = 0
        for i in range(1, len(chunk)):
            if _starts_word(chunk, i):
                words.append(chunk[start:i])
                start = i
        words.append(chunk[start:])
    return words


def kebab_case(text: str) -> str:
    return "-".join(word.lower() for word in split_words(text))


def snake_case(text: str) -> str:
    return "_".join(word.lower() for word in split_words(text))


def shouty_kebab_case(text: str) -> str:
    return "-".join(word.upper() for word in split_words(text))


def shouty_snake_case(text: str) -> str:
    return "_".join(word.upper() for word in split_words(text))


def upper_camel_case(text: str) -> str:
    return "".join(word.capitalize() for word in split_words(text))


# Same thing, both spellings are common in templates
pascal_case = upper_camel_case


def lower_camel_case(text: str) -> str:
    words = split_words(text)
    if not words:
        return ""
    return words[0].lower() + "".join(word.capitalize() for word in words[1:])


def title_case(text: str) -> str:
    return " ".join(word.capitalize() for word in split_words(text))


CASE_FILTERS = {
    "kebab_case": kebab_case,
    "lower_camel_case": lower_camel_case,
    "pascal_case": pascal_case,
    "shouty_kebab_case": shouty_kebab_case,
    "shouty_snake_case": shouty_snake_case,
    "snake_case": snake_case,
    "title_case": title_case,
    "upper_camel_case": upper_camel_case,
}
