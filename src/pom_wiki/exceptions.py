"""Custom exceptions for pom-wiki."""


class PomWikiError(Exception):
    """Base exception for pom-wiki."""


class CoordinateError(PomWikiError):
    """Raised when a groupId, artifactId or version is missing."""


class NotFoundError(PomWikiError):
    """Raised when a POM exists neither locally nor in the remote repository."""


class MalformedDocumentError(PomWikiError):
    """Raised when retrieved POM content cannot be parsed."""


class CyclicParentError(PomWikiError):
    """Raised when a parent chain loops or exceeds the allowed depth."""


class PublishError(PomWikiError):
    """Base exception for wiki publishing failures."""


class PublishAuthError(PublishError):
    """Raised when the wiki rejects the supplied credentials."""


class PublishTransportError(PublishError):
    """Raised when a page edit fails in transit or is refused by the wiki."""
