class SortError(Exception):
    pass


class InvalidInput(SortError, ValueError):
    pass


class DeviceError(SortError):
    def __init__(self, message, cause=None):
        super().__init__(message)
        self.cause = cause

    def __str__(self):
        message = super().__str__()
        if self.cause is not None:
            return f"{message}: {self.cause!r}"
        return message


class ResourceExhausted(SortError):
    def __init__(self, requested_bytes, available_bytes=None):
        self.requested_bytes = requested_bytes
        self.available_bytes = available_bytes
        if available_bytes is None:
            message = f"could not allocate {requested_bytes} bytes"
        else:
            message = f"buffer of {requested_bytes} bytes exceeds device limit of {available_bytes} bytes"
        super().__init__(message)
