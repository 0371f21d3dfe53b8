"""Report lifecycle counters; HTTP metrics come from the instrumentator in main.py."""
from prometheus_client import Counter


REPORTS_SUBMITTED = Counter(
    "buzzly_reports_submitted_total",
    "Content reports filed by users",
    ["reason"],
)

REPORT_TRANSITIONS = Counter(
    "buzzly_report_transitions_total",
    "Report status changes made by moderators",
    ["from_status", "to_status"],
)

REPORT_TRANSITION_CONFLICTS = Counter(
    "buzzly_report_transition_conflicts_total",
    "Report status writes that lost a race with another moderator",
)
