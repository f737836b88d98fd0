class RemoteError(Exception):
    """A call to the website backend failed (transport or non-2xx)."""

    def __init__(self, message, *, status_code=None, code=None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class PublishNotConfirmed(RemoteError):
    """
    The path did not read back with exactly the published target.

    Retryable: a retry whose earlier publish already landed is reported as
    success once the path reads back with the target as its only published
    row.
    """
