from prometheus_client import Counter


# === Domain Metrics ===
# HTTP request metrics and the /metrics endpoint come from the instrumentator in main.

slot_bookings_total = Counter(
    "slot_bookings_total", "Booking attempts by outcome",
    ["result"]
)

slot_cancellations_total = Counter(
    "slot_cancellations_total", "Cancellation attempts by outcome",
    ["result"]
)

slot_searches_total = Counter(
    "slot_searches_total", "Closest-slot searches served"
)

api_exception_counter = Counter(
    "api_exception_count", "Total API exceptions by type",
    ["type"]
)


def outcome(ok: bool) -> str:
    return "success" if ok else "rejected"
