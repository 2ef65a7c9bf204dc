"""
Exception hierarchy for oapi-typegen.

Structural problems found while compiling a schema abort the whole run and
always carry the breadcrumb path of the schema they were raised for. Loader
and configuration errors are raised before any schema is compiled.
"""

from typing import Optional, Sequence


class CodegenError(Exception):
    """Base class for every error raised by this package."""


class LoaderError(CodegenError):
    """The document could not be read, parsed or normalized."""


class ConfigError(CodegenError):
    """The configuration file or options are invalid."""


class SchemaError(CodegenError):
    def __init__(self, message: str, path: Optional[Sequence[str]] = None) -> None:
        self.path: tuple[str, ...] = tuple(path or ())
        self.reason = message
        if self.path:
            message = f"{'.'.join(self.path)}: {message}"
        super().__init__(message)


class UnhandledTypeError(SchemaError):
    pass


class InvalidFormatError(SchemaError):
    pass


class PropertyConflictError(SchemaError):
    pass


class DiscriminatorError(SchemaError):
    pass


class UnsupportedReferenceError(SchemaError):
    pass


class ExtensionError(SchemaError):
    pass


class TypeNameCollisionError(CodegenError):
    """No free name was found for a generated type within the probe bound."""

    def __init__(self, type_name: str, json_name: str = "") -> None:
        self.type_name = type_name
        self.json_name = json_name
        where = f" (from {json_name})" if json_name else ""
        super().__init__(f"unable to find a unique name for type {type_name!r}{where}")
