class TaskTrackerError(Exception):
    """Base class for task tracker errors"""


class ValidationError(TaskTrackerError):
    """Input rejected before reaching storage (e.g. a blank title)"""


class NotFoundError(TaskTrackerError):
    """No task with the given id"""

    def __init__(self, task_id: str):
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class StorageError(TaskTrackerError):
    """Connection or query failure in the database layer"""


class SuggestionError(TaskTrackerError):
    """Any failure while asking the model for a suggestion.

    Never leaves SuggestionService; it is turned into the fallback suggestion.
    """
