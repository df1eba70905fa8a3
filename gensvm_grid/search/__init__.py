"""
Search Component

Generation, evaluation and selection of grid search tasks:
- Task and TaskFactory for expanding a grid into a queue
- Queue holding the tasks and assigning their IDs
- Evaluator for cross-validation and train/test scoring
- Selector and ConsistencyRepeater for picking the winner
"""

from .evaluator import (
    Evaluator,
    FoldPlan,
    make_cv_split,
    prediction_accuracy,
)
from .queue import (
    Queue,
    QueueSealedError,
)
from .selection import (
    ConsistencyRecord,
    ConsistencyRepeater,
    RepeaterState,
    SearchResult,
    SelectionError,
    Selector,
)
from .tasks import (
    MAX_QUEUE_SIZE,
    PERFORMANCE_SENTINEL,
    Task,
    TaskFactory,
)

__all__ = [
    # Tasks
    "MAX_QUEUE_SIZE",
    "PERFORMANCE_SENTINEL",
    "Task",
    "TaskFactory",
    # Queue
    "Queue",
    "QueueSealedError",
    # Evaluation
    "Evaluator",
    "FoldPlan",
    "make_cv_split",
    "prediction_accuracy",
    # Selection
    "ConsistencyRecord",
    "ConsistencyRepeater",
    "RepeaterState",
    "SearchResult",
    "SelectionError",
    "Selector",
]
