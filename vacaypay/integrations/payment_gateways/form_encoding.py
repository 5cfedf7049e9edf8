"""
Bracketed-key form encoding, as expected by Stripe's v1 endpoints.

Nested mappings flatten to ``parent[child]=value`` and lists to repeated
``parent[]=value``. Keys are emitted as-is; values are escaped with
``quote_plus``. Blank values are dropped, except ``False``, which is always
sent.
"""

from typing import Any, List, Mapping, Optional
from urllib.parse import quote_plus


def is_blank(value: Any) -> bool:
    if value is False:
        return False
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (dict, list, tuple, set)):
        return len(value) == 0
    return False


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def encode_form(params: Optional[Mapping[str, Any]]) -> Optional[str]:
    """
    Encode ``params`` as a bracketed form body.

    >>> encode_form({"card": {"number": "4242", "cvc": ""}, "tags": ["a", "b"]})
    'card[number]=4242&tags[]=a&tags[]=b'
    """
    if params is None:
        return None

    pairs: List[str] = []
    for key, value in params.items():
        if is_blank(value):
            continue
        if isinstance(value, Mapping):
            nested = {f"{key}[{child}]": child_value for child, child_value in value.items()}
            encoded = encode_form(nested)
            if encoded:
                pairs.append(encoded)
        elif isinstance(value, (list, tuple)):
            pairs.extend(f"{key}[]={quote_plus(_scalar(item))}" for item in value)
        else:
            pairs.append(f"{key}={quote_plus(_scalar(value))}")

    return "&".join(pairs)
