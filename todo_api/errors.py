# todo_api/errors.py
"""Business errors raised by the todo repository."""

import uuid


class TodoNotFoundError(LookupError):
    """Raised when an update or delete targets an id with no stored todo."""

    def __init__(self, todo_id: uuid.UUID):
        super().__init__(f"Todo {todo_id} not found")
        self.todo_id = todo_id
