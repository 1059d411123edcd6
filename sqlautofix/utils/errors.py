"""
Custom error classes for the application

fix() never lets one escape: SelfCheckError is caught inside the pipeline, and
SchemaSnapshotError is raised by schema loading before fix() runs.
"""


class AutoFixError(Exception):
    """Base exception for sqlautofix errors"""
    pass


class SchemaSnapshotError(AutoFixError):
    """Schema document could not be turned into a snapshot"""
    pass


class SelfCheckError(AutoFixError):
    """Rendered SQL does not reproduce untouched parts of the input"""
    pass
