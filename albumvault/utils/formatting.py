# albumvault/utils/formatting.py
"""Human-readable rendering helpers shared by the photo responses."""

SIZE_UNITS = ("Bytes", "KB", "MB", "GB")
_STEP = 1024


def format_size(size_bytes: int) -> str:
    """Render a byte count as e.g. ``"2 KB"`` or ``"1.46 MB"``.

    The unit is the largest of Bytes/KB/MB/GB that keeps the value at or above
    1; the value is rounded to two decimals with trailing zeros dropped.
    """
    if size_bytes < 0:
        raise ValueError(f"size must be >= 0: {size_bytes}")
    if size_bytes == 0:
        return "0 Bytes"

    exponent = 0
    while exponent < len(SIZE_UNITS) - 1 and size_bytes >= _STEP ** (exponent + 1):
        exponent += 1

    value = round(size_bytes / _STEP ** exponent, 2)
    # 1048575 bytes rounds to 1024 KB; show it as 1 MB instead
    if value >= _STEP and exponent < len(SIZE_UNITS) - 1:
        exponent += 1
        value = round(size_bytes / _STEP ** exponent, 2)
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {SIZE_UNITS[exponent]}"
