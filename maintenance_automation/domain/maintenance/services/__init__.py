from .automation_orchestrator import (
    AutomationOrchestrator,
    RunResult,
    TaskFailure,
    run_automation_now,
)
from .deduplicator import AlertDeduplicator
from .rescheduler import Rescheduler
from .run_log_recorder import RunLogRecorder
from .technician_load import (
    LoadStatistics,
    TechnicianLoadCalculator,
    TechnicianLoadSnapshot,
    classify_load,
    compute_load_score,
)
from .technician_selector import SelectionResult, TechnicianSelector
from .urgency_classifier import classify_due_status, classify_urgency, days_until
from .work_order_sequencer import WorkOrderSequencer, format_human_id

__all__ = [
    "AlertDeduplicator",
    "AutomationOrchestrator",
    "LoadStatistics",
    "Rescheduler",
    "RunLogRecorder",
    "RunResult",
    "SelectionResult",
    "TaskFailure",
    "TechnicianLoadCalculator",
    "TechnicianLoadSnapshot",
    "TechnicianSelector",
    "WorkOrderSequencer",
    "classify_due_status",
    "classify_load",
    "classify_urgency",
    "compute_load_score",
    "days_until",
    "format_human_id",
    "run_automation_now",
]
