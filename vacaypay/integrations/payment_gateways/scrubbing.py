"""
Redaction of sensitive values in HTTP transcripts.

Only the secret value is replaced; header names, JSON keys, quotes and the
surrounding text are left byte-identical. Running ``scrub`` twice gives the
same output as running it once.
"""

import re
from typing import List, Pattern, Tuple

FILTERED = "[FILTERED]"

# JSON keys may appear escaped (\"number\":\"...\") when the transcript
# quotes a request body.
_JSON_CARD_FIELDS = ("number", "cvv", "cvc")
_FORM_CARD_FIELDS = ("number", "cvc")

_PATTERNS: List[Tuple[Pattern[str], str]] = [
    (re.compile(r"(X-Auth-Token: )[^\\\r\n\"]+", re.IGNORECASE), r"\1" + FILTERED),
    (re.compile(r"(Authorization: (?:Basic|Bearer) )[^\s\\\"]+", re.IGNORECASE), r"\1" + FILTERED),
]
_PATTERNS += [
    (re.compile(rf'("{name}\\?"\s*:\s*\\?")[^"\\]+(\\?")'), r"\1" + FILTERED + r"\2")
    for name in _JSON_CARD_FIELDS
]
_PATTERNS += [
    (re.compile(rf'(card(?:\[|%5B){name}(?:\]|%5D)=)[^&\s"\\]+', re.IGNORECASE), r"\1" + FILTERED)
    for name in _FORM_CARD_FIELDS
]


def scrub(transcript: str) -> str:
    for pattern, replacement in _PATTERNS:
        transcript = pattern.sub(replacement, transcript)
    return transcript
