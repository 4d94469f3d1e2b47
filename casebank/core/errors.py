class RestoreError(Exception):
    """Base class for failures that abort a restore run."""


class MalformedTreeError(RestoreError):
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class RestoreStateError(RestoreError):
    pass
