"""
Study Module for flashdeck.

Provides:
- Mastery calculation from completed study history
- Retention prediction
- Adaptive (uniform / weighted) queue building
- The quiz session state machine shared by every study mode
- StudyService orchestration over a record store
"""

from flashdeck.study.mastery_calculator import (
    CardMastery,
    MasteryEstimator,
    MasteryHints,
    MasteryStatus,
    SetStatistics,
    count_improved,
    estimate_mastery,
    estimate_retention,
    summarize_set,
)
from flashdeck.study.queue_builder import (
    AdaptiveQueueBuilder,
    BiasStrategy,
    QueueConfig,
    QueueEntry,
    build_queue,
)
from flashdeck.study.quiz_engine import (
    QuizSession,
    SessionPhase,
    SessionStats,
    SessionView,
    start_session,
)
from flashdeck.study.retention_engine import (
    RetentionEstimate,
    RetentionEstimator,
    RetentionStatus,
)
from flashdeck.study.study_service import (
    ActiveStudy,
    StudyOutcomeReport,
    StudyService,
    StudySnapshot,
)

__all__ = [
    "ActiveStudy",
    "AdaptiveQueueBuilder",
    "BiasStrategy",
    "CardMastery",
    "MasteryEstimator",
    "MasteryHints",
    "MasteryStatus",
    "QueueConfig",
    "QueueEntry",
    "QuizSession",
    "RetentionEstimate",
    "RetentionEstimator",
    "RetentionStatus",
    "SessionPhase",
    "SessionStats",
    "SessionView",
    "SetStatistics",
    "StudyOutcomeReport",
    "StudyService",
    "StudySnapshot",
    "build_queue",
    "count_improved",
    "estimate_mastery",
    "estimate_retention",
    "start_session",
    "summarize_set",
]
