from urllib.parse import quote


def _tail(address: str, n: int = 6) -> str:
    """Return the last n characters of a lowercased address (for concise logs)."""
    addr = (address or "").lower()
    return addr[-n:] if len(addr) >= n else addr


def encode_path_segment(value: str) -> str:
    """Percent-encode a value for use as a single URL path segment (no '/' passes through)."""
    return quote(str(value), safe="")
