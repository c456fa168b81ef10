from datetime import datetime, timedelta

FREQUENCIES = ("8hours", "daily", "weekly")


def next_run(frequency: str, now: datetime) -> datetime:
    """
    Next scheduled backup time.

    8hours -> now + 8h; daily -> next midnight; weekly -> the coming
    Sunday midnight (a full week ahead when today is Sunday).
    """
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)

    if frequency == "8hours":
        return now + timedelta(hours=8)
    if frequency == "daily":
        return midnight + timedelta(days=1)
    if frequency == "weekly":
        # Monday=0 ... Sunday=6
        days_ahead = 6 - now.weekday()
        if days_ahead == 0:
            days_ahead = 7
        return midnight + timedelta(days=days_ahead)
    return now + timedelta(days=1)


def human_size(num_bytes: int) -> str:
    size = float(num_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024 or unit == "GB":
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"
