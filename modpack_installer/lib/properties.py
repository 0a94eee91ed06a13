from __future__ import annotations

from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Any, Mapping, Optional


def _fmt_value(value: Any) -> str:
    # Java's Properties reader expects lowercase booleans.
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def render_properties(
    mapping: Mapping[str, Any],
    header: Optional[str] = None,
    include_timestamp: bool = True,
    *,
    now: Optional[datetime] = None,
) -> str:
    """Render a flat mapping as a commented ``key=value`` block.

    Lines follow the mapping's iteration order. Nothing is escaped. There is
    no trailing newline; an empty mapping with no header and no timestamp
    renders as an empty string.
    """

    lines: list[str] = []
    if header:
        lines.append(f"# {header}")
    if include_timestamp:
        stamp = now or datetime.now(timezone.utc)
        lines.append(f"# {format_datetime(stamp.astimezone(timezone.utc), usegmt=True)}")
    for key, value in mapping.items():
        lines.append(f"{key}={_fmt_value(value)}")
    return "\n".join(lines)
