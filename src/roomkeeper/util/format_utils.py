from datetime import datetime, timezone
from typing import List

from roomkeeper.util.logger import get_logger

logger = get_logger("format_utils")

ELLIPSIS = "..."


def humanize_timestamp(value: datetime) -> str:
    """Return a human-readable timestamp (YYYY-MM-DD HH:MM:SS) in UTC.

    Naive datetimes are assumed to already be UTC.

    Args:
        value: datetime object to format.

    Returns:
        Human-readable UTC timestamp string.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)

    now = datetime.now(timezone.utc)
    if value > now:
        logger.warning("[FORMAT UTILS] Timestamp %s is in the future; clamping to now", value.isoformat())
        value = now
    return value.strftime("%Y-%m-%d %H:%M:%S UTC")


def fill_template(template: str, *values: object) -> str:
    """Replace successive ``{}`` placeholders with ``values``.

    Unlike :meth:`str.format`, literal braces elsewhere in the template are left
    alone and surplus placeholders stay in place, so operator-edited templates
    can never raise.
    """
    result = template
    for value in values:
        if "{}" not in result:
            break
        result = result.replace("{}", str(value), 1)
    return result


def crop_message(text: str, limit: int) -> str:
    """Trim ``text`` to ``limit`` characters, ending with an ellipsis when cut."""
    if limit <= 0 or len(text) <= limit:
        return text
    if limit <= len(ELLIPSIS):
        return text[:limit]
    return text[: limit - len(ELLIPSIS)] + ELLIPSIS


def chunk_text(text: str, size: int = 120) -> List[str]:
    """Split ``text`` into consecutive pieces of at most ``size`` characters."""
    if size <= 0:
        raise ValueError("size must be positive")
    return [text[i : i + size] for i in range(0, len(text), size)]


def wrap_words(text: str, size: int = 120) -> List[str]:
    """Greedy word wrap on single spaces.

    Newlines inside a chunk are kept as-is. A word longer than ``size`` is hard
    split so no chunk ever exceeds the limit.
    """
    chunks: List[str] = []
    current = ""
    for word in text.split(" "):
        if len(word) > size:
            if current:
                chunks.append(current)
            pieces = chunk_text(word, size)
            chunks.extend(pieces[:-1])
            current = pieces[-1]
            continue
        if not current:
            current = word
        elif len(current) + 1 + len(word) <= size:
            current = f"{current} {word}"
        else:
            chunks.append(current)
            current = word
    if current:
        chunks.append(current)
    return chunks


def format_duration(seconds: float) -> str:
    """Render a duration as ``1 hour``, ``15 minutes`` or ``30 seconds``."""
    seconds = int(seconds)
    for unit, size in (("hour", 3600), ("minute", 60)):
        if seconds >= size and seconds % size == 0:
            count = seconds // size
            return f"{count} {unit}" + ("s" if count != 1 else "")
    return f"{seconds} second" + ("s" if seconds != 1 else "")


def chunk_lines(lines: List[str], limit: int, separator: str = "\n") -> List[str]:
    """Pack whole lines into messages no longer than ``limit``.

    A single line longer than ``limit`` is split with :func:`chunk_text`.
    """
    messages: List[str] = []
    current = ""
    for line in lines:
        pieces = chunk_text(line, limit) if len(line) > limit else [line]
        for piece in pieces:
            candidate = f"{current}{separator}{piece}" if current else piece
            if len(candidate) > limit:
                messages.append(current)
                current = piece
            else:
                current = candidate
    if current:
        messages.append(current)
    return messages
