# Human-readable renderings for panel resource figures.
# Author: Asuna maintainers
# Date: 2026-10-18
# Version: 0.1.0

_BYTE_UNITS = ["Bytes", "KB", "MB", "GB", "TB", "PB", "EB", "ZB", "YB"]


def format_bytes(num_bytes: int, decimals: int = 2) -> str:
    """Formats a byte count with binary (1024) steps, e.g. 1536 -> '1.5 KB'."""
    if num_bytes <= 0:
        return "0 Bytes"
    decimals = max(decimals, 0)
    value = float(num_bytes)
    index = 0
    while value >= 1024 and index < len(_BYTE_UNITS) - 1:
        value /= 1024
        index += 1
    rendered = f"{value:.{decimals}f}"
    if decimals:
        # 2048 reads '2 KB', not '2.00 KB'
        rendered = rendered.rstrip("0").rstrip(".")
    return f"{rendered} {_BYTE_UNITS[index]}"


def format_uptime(milliseconds: int) -> str:
    """Formats an uptime in milliseconds as '1d 2h 3m 4s', omitting zero units."""
    seconds = max(int(milliseconds), 0) // 1000
    days, seconds = divmod(seconds, 86400)
    hours, seconds = divmod(seconds, 3600)
    minutes, seconds = divmod(seconds, 60)

    parts = []
    if days:
        parts.append(f"{days}d")
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if seconds or not parts:
        parts.append(f"{seconds}s")
    return " ".join(parts)
