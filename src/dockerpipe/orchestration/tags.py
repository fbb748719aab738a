"""
Image tag helpers.
"""

import re

_TRAILING_DIGITS = re.compile(r"[0-9]+\Z")

NO_DIGITS_SUFFIX = " _1"


def increment_tag(tag: str) -> str:
    """Increment the number at the end of an image tag.

    The trailing run of decimal digits is parsed as an integer, incremented,
    and written back in place; zero padding is not preserved. A tag without
    trailing digits gets ``" _1"`` appended.

    Examples:
        >>> increment_tag("v2")
        'v3'
        >>> increment_tag("build-009")
        'build-10'
        >>> increment_tag("release")
        'release _1'
    """
    match = _TRAILING_DIGITS.search(tag)
    if match is None:
        return tag + NO_DIGITS_SUFFIX
    return tag[:match.start()] + str(int(match.group()) + 1)
