from __future__ import annotations

from typing import Optional


class TodoAIError(Exception):
    """Base class for every failure the service reports to its callers."""

    code = "INTERNAL_ERROR"
    status_code = 500
    user_message = "Something went wrong. Please try again."
    retryable = False

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or self.user_message)
        self.detail = detail


# Input validation (no model call is made)

class InputValidationError(TodoAIError, ValueError):
    code = "INVALID_INPUT"
    status_code = 400


class EmptyInput(InputValidationError):
    code = "EMPTY_INPUT"
    user_message = "The input is empty. Please describe a task."


class TooShort(InputValidationError):
    code = "INPUT_TOO_SHORT"
    user_message = "The input is too short. Please enter at least 2 characters."


class TooLong(InputValidationError):
    code = "INPUT_TOO_LONG"
    user_message = "The input is too long. Please keep it under 500 characters."


class NoMeaningfulContent(InputValidationError):
    code = "NO_MEANINGFUL_CONTENT"
    user_message = "The input has no usable content. Please describe the task in words."


# Model provider failures, classified at the client boundary

class ModelError(TodoAIError):
    code = "MODEL_ERROR"
    status_code = 502
    user_message = "The AI service failed to process the request. Please try again."


class ModelTimeout(ModelError):
    code = "MODEL_TIMEOUT"
    status_code = 504
    user_message = "The AI service took too long to respond. Please try again shortly."
    retryable = True


class ModelRateLimited(ModelError):
    code = "RATE_LIMIT_EXCEEDED"
    status_code = 429
    user_message = "The AI service usage limit was reached. Please try again shortly."
    retryable = True


class ModelAuthError(ModelError):
    code = "MODEL_AUTH_ERROR"
    status_code = 500
    user_message = "The AI service is not configured correctly."


class ModelSchemaViolation(ModelError):
    code = "MODEL_SCHEMA_VIOLATION"


class ModelProviderError(ModelError):
    code = "MODEL_PROVIDER_ERROR"


# Record store

class StoreError(TodoAIError):
    code = "STORE_ERROR"
    status_code = 503
    user_message = "Your tasks could not be loaded. Please sign in again or retry."


class TaskNotFound(TodoAIError):
    code = "TASK_NOT_FOUND"
    status_code = 404
    user_message = "The task does not exist."


class InvalidPeriod(InputValidationError):
    code = "INVALID_PERIOD"
    user_message = "The period must be 'day' or 'week'."
