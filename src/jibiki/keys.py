"""Cache key composition."""

from jibiki.types import LookupKey

KEY_SEPARATOR = "_"


def build_key(function_name: str, lookup_key: LookupKey, page: int = 0) -> str:
    """Compose ``{function_name}_{lookup_key}_{page}``.

    The lookup key is used as given; lower-casing textual keys is up to the
    caller so numeric ids pass through untouched. Function names may not
    contain the separator, which keeps the family and the page recoverable
    from any composed key.
    """
    if not function_name or KEY_SEPARATOR in function_name:
        raise ValueError(f"Invalid function name: {function_name!r}")
    return f"{function_name}{KEY_SEPARATOR}{lookup_key}{KEY_SEPARATOR}{page}"
