"""
Vendor extensions (`x-...` keys) understood by the compiler.
"""

from typing import Any, Optional, Sequence

from oapi_typegen.errors import ExtensionError

GO_TYPE = "x-go-type"
GO_TYPE_SKIP_OPTIONAL_POINTER = "x-go-type-skip-optional-pointer"
GO_TYPE_IMPORT = "x-go-type-import"
GO_NAME = "x-go-name"
GO_TYPE_NAME = "x-go-type-name"
GO_JSON_IGNORE = "x-go-json-ignore"
OMIT_EMPTY = "x-omitempty"
OMIT_ZERO = "x-omitzero"
EXTRA_TAGS = "x-oapi-codegen-extra-tags"
ENUM_VAR_NAMES = "x-enum-varnames"
ENUM_NAMES = "x-enumNames"
DEPRECATED_REASON = "x-deprecated-reason"
ORDER = "x-order"
ONLY_HONOUR_GO_NAME = "x-oapi-codegen-only-honour-go-name"


def _invalid(key: str, expected: str, value: Any, path: Optional[Sequence[str]]) -> ExtensionError:
    return ExtensionError(f"invalid value for {key!r}: expected {expected}, got {value!r}", path)


def ext_string(extensions: dict[str, Any], key: str, *, path: Optional[Sequence[str]] = None) -> Optional[str]:
    if key not in extensions:
        return None
    value = extensions[key]
    if not isinstance(value, str):
        raise _invalid(key, "a string", value, path)
    return value


def ext_bool(extensions: dict[str, Any], key: str, *, path: Optional[Sequence[str]] = None) -> Optional[bool]:
    if key not in extensions:
        return None
    value = extensions[key]
    if not isinstance(value, bool):
        raise _invalid(key, "a boolean", value, path)
    return value


def ext_string_list(
    extensions: dict[str, Any], key: str, *, path: Optional[Sequence[str]] = None
) -> Optional[list[str]]:
    if key not in extensions:
        return None
    value = extensions[key]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise _invalid(key, "a list of strings", value, path)
    return list(value)


def ext_string_map(
    extensions: dict[str, Any], key: str, *, path: Optional[Sequence[str]] = None
) -> Optional[dict[str, str]]:
    if key not in extensions:
        return None
    value = extensions[key]
    if not isinstance(value, dict) or not all(isinstance(v, str) for v in value.values()):
        raise _invalid(key, "a mapping of strings", value, path)
    return {str(k): v for k, v in value.items()}


def enum_var_names(extensions: dict[str, Any], *, path: Optional[Sequence[str]] = None) -> Optional[list[str]]:
    """Explicit enum constant names, `x-enum-varnames` taking precedence over `x-enumNames`."""
    for key in (ENUM_VAR_NAMES, ENUM_NAMES):
        names = ext_string_list(extensions, key, path=path)
        if names is not None:
            return names
    return None


def type_import(extensions: dict[str, Any], *, path: Optional[Sequence[str]] = None) -> Optional[dict[str, str]]:
    """`x-go-type-import` accepts either an import path or {path, name}."""
    if GO_TYPE_IMPORT not in extensions:
        return None
    value = extensions[GO_TYPE_IMPORT]
    if isinstance(value, str):
        return {"path": value, "name": ""}
    if isinstance(value, dict) and isinstance(value.get("path"), str):
        return {"path": value["path"], "name": str(value.get("name") or "")}
    raise _invalid(GO_TYPE_IMPORT, "an import path or {path, name}", value, path)
