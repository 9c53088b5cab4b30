from typing import Iterable

RESET = "\u001B[0m"
RED = "\u001B[31m"
GREEN = "\u001B[32m"
BOLD = "\u001B[1m"

ROW_FORMAT = "| {:<10} | {:<15} | {:<8} | {:<10} | {:<8} | {:<20} |"
LINE = "+------------+-----------------+----------+------------+----------+----------------------+"
HEADER = ROW_FORMAT.format("Date", "Time Slot", "Booked", "Client", "Advisor", "Description")


def render_calendar_table(slots: Iterable, color: bool = True) -> str:
    """
    Operator view of the calendar: one row per slot, ordered by date then start.
    """
    rows = [LINE, f"{BOLD}{HEADER}{RESET}" if color else HEADER, LINE]

    for slot in sorted(slots, key=lambda s: (s.date, s.start_time)):
        span = f"{slot.start_time:%H:%M} - {slot.end_time:%H:%M}"
        status = "Yes" if slot.booked else "No"
        # pad before coloring so escape codes don't break the column width
        status = f"{status:<8}"
        if color:
            status = f"{RED if slot.booked else GREEN}{status}{RESET}"
        rows.append(
            ROW_FORMAT.format(
                slot.date.isoformat(),
                span,
                status,
                slot.client.strip(),
                slot.advisor.strip(),
                slot.description.strip(),
            )
        )

    rows.append(LINE)
    return "\n".join(rows)
