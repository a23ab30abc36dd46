"""Exceptions raised by the content pipeline."""


class XmlContentError(Exception):
    """Base class for all content pipeline errors."""
    pass


class SchemaError(XmlContentError):
    """A content definition (XSD) is not a valid OpenCms content definition."""
    pass


class SchemaResolutionError(SchemaError):
    """A schema location could not be resolved to a readable schema."""

    def __init__(self, location: str, reason: str):
        super().__init__(f"Cannot resolve schema '{location}': {reason}")
        self.location = location
        self.reason = reason


class ContentError(XmlContentError):
    """An XML content document does not match its content definition."""

    def __init__(self, message: str, xpath: str | None = None):
        if xpath:
            message = f"{message} (at {xpath})"
        super().__init__(message)
        self.xpath = xpath


class LocaleNotFoundError(XmlContentError):
    """The requested locale is not present in the content."""

    def __init__(self, locale: str, available: list[str]):
        super().__init__(
            f"Locale '{locale}' not found, available: {', '.join(available) or 'none'}"
        )
        self.locale = locale
        self.available = available


class ContentNotFoundError(XmlContentError):
    """A content or schema file does not exist in the repository."""
    pass


class RepositoryPathError(XmlContentError):
    """A repository path is malformed or points outside the repository root."""
    pass
