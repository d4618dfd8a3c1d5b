"""
Training Session Engine.

Provides:
- SessionController: per-scenario state machine and global countdown
- QuizEngine / KnowledgeGate: timed questions and the knowledge gate
- ActionTracker: practice action counting and step completion
- score_step / summarize: deterministic scoring
- ManualScheduler / AsyncioScheduler: cancelable timers
"""

from rescue_drill.training.action_tracker import ActionReport, ActionTracker, compression_rate
from rescue_drill.training.quiz_engine import (
    TIMEOUT_INDEX,
    AnswerOutcome,
    GateDecision,
    KnowledgeGate,
    QuizEngine,
    QuizFlavor,
    QuizState,
)
from rescue_drill.training.scheduler import AsyncioScheduler, ManualScheduler, Scheduler
from rescue_drill.training.scoring import (
    ActionQuality,
    ScoreSummary,
    performance_label,
    score_step,
    summarize,
)
from rescue_drill.training.session import (
    SessionController,
    SessionEvent,
    SessionEventType,
    SessionResult,
)
from rescue_drill.training.state import (
    IncompleteStep,
    KnowledgeResult,
    Phase,
    SessionOutcome,
    SessionState,
    StepResult,
)

__all__ = [
    "TIMEOUT_INDEX",
    "ActionQuality",
    "ActionReport",
    "ActionTracker",
    "AnswerOutcome",
    "AsyncioScheduler",
    "GateDecision",
    "IncompleteStep",
    "KnowledgeGate",
    "KnowledgeResult",
    "ManualScheduler",
    "Phase",
    "QuizEngine",
    "QuizFlavor",
    "QuizState",
    "Scheduler",
    "ScoreSummary",
    "SessionController",
    "SessionEvent",
    "SessionEventType",
    "SessionOutcome",
    "SessionResult",
    "SessionState",
    "StepResult",
    "compression_rate",
    "performance_label",
    "score_step",
    "summarize",
]
