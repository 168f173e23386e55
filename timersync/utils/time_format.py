"""Display helpers for timer values"""


def format_time(seconds: int) -> str:
    """
    Format a second count as MM:SS.

    Negative values (overrun) keep their sign: -75 -> "-01:15".
    """
    sign = "-" if seconds < 0 else ""
    mins, secs = divmod(abs(seconds), 60)
    return f"{sign}{mins:02d}:{secs:02d}"


def split_duration(total_seconds: int) -> tuple[int, int]:
    """Split a duration into (minutes, seconds)"""
    return divmod(total_seconds, 60)


def to_seconds(minutes: int, seconds: int) -> int:
    return minutes * 60 + seconds
