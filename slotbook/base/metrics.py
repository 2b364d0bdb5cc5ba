from prometheus_client import Counter, Histogram


# === Scheduling Metrics ===

booking_counter = Counter(
    "slotbook_bookings_total", "Interview booking attempts by outcome",
    ["outcome"]
)

reschedule_counter = Counter(
    "slotbook_reschedules_total", "Interview reschedule attempts by outcome",
    ["outcome"]
)

cancellation_counter = Counter(
    "slotbook_cancellations_total", "Interview cancellations by outcome",
    ["outcome"]
)

calendar_failure_counter = Counter(
    "slotbook_calendar_failures_total", "External calendar call failures by operation",
    ["operation"]
)

availability_duration = Histogram(
    "slotbook_availability_duration_seconds", "Time spent computing availability",
    ["scope"]
)

api_exception_counter = Counter(
    "slotbook_api_exception_count", "Total API exceptions by type",
    ["type"]
)
