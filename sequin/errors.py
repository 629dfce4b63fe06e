class SequinError(Exception):
    """base class for errors raised by sequin itself (never for caller function failures)"""
    pass


class DuplicateKeyError(SequinError, ValueError):
    """two elements mapped to an equal key and no merge function was given"""

    def __init__(self, key, existing, incoming):
        super().__init__(f"duplicate key {key!r} (attempted merging values {existing!r} and {incoming!r})")
        self.key = key
        self.existing = existing
        self.incoming = incoming


class NoSuchElementError(SequinError, LookupError):
    """a value was requested from an empty option"""
    pass


class StreamConsumedError(SequinError, RuntimeError):
    """a single-use source was evaluated a second time"""
    pass
