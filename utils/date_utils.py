from datetime import date, timedelta


def month_start(d: date) -> date:
    return d.replace(day=1)


def month_key(d: date) -> str:
    return f"{d.year}-{d.month:02d}"


def last_completed_months(n: int, today: date | None = None) -> list[str]:
    """
    Month keys ("YYYY-MM") for the `n` most recent completed months,
    newest first. The current month is never included.
    """
    cur = month_start(today or date.today())
    keys = []
    for _ in range(n):
        cur = month_start(cur - timedelta(days=1))
        keys.append(month_key(cur))
    return keys
