# datasources/exceptions.py

class SourceError(Exception):
    pass


class SourceUnreadable(SourceError):
    pass


class InvalidTimeWindow(SourceError):
    pass


class PatternCatalogError(SourceError):
    pass
