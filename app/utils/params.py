from typing import Optional


def parse_int(value: Optional[str], default: int) -> int:
    """Lenient query-string integer: anything unparseable yields ``default``."""
    if value is None:
        return default
    try:
        return int(str(value).strip())
    except ValueError:
        return default
