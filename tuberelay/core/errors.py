"""Exceptions raised by the relay."""


class RelayError(Exception):
    """Base class for relay errors."""


class PersistenceError(RelayError):
    """The mapping file could not be read or written."""
    
    def __init__(self, path, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path


class MappingParseError(PersistenceError):
    """The mapping file exists but does not hold a flat JSON object of strings."""


class MappingWriteError(PersistenceError):
    """The mapping file could not be written."""
