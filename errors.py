# errors.py


class CacheError(Exception):
    """Base class for everything the simulator raises."""


class ConfigurationError(CacheError, ValueError):
    """Cache options that do not describe a valid geometry or policy."""


class DecodeError(CacheError, ValueError):
    """Address text that is not a 64-bit base-16 number."""


class InvalidOperation(CacheError, ValueError):
    """Operation code other than LOAD or STORE."""


class TraceFormatError(CacheError, ValueError):
    def __init__(self, message, line_number=None):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number
