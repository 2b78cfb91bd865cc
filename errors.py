"""Error types shared across SwiftLink."""


class ValidationError(ValueError):
    """User input is not a usable URL, even after normalization."""


class StorageError(Exception):
    """Reading from or writing to the key-value storage failed."""


class AnnotationServiceError(Exception):
    """The annotation call failed. Never escapes the Annotator."""


class DuplicateSubmissionError(Exception):
    """The same normalized URL is already being shortened."""

    def __init__(self, url: str):
        super().__init__(f"{url} is already being shortened")
        self.url = url
