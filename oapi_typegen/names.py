"""
Identifier synthesis: turning schema names, property names and path
breadcrumbs into valid, unique Go identifiers.
"""

import re
from typing import Any, Collection, Mapping, Sequence

from oapi_typegen import extensions as ext

# Characters after which the next letter is upper-cased.
_SEPARATORS = frozenset("-#@!$&=.+:;_~ (){}[]")

# Suffixes 2 through this bound are probed before giving up.
MAX_RENAME_SUFFIX = 10

GO_KEYWORDS = frozenset(
    {
        "break", "case", "chan", "const", "continue", "default", "defer", "else",
        "fallthrough", "for", "func", "go", "goto", "if", "import", "interface",
        "map", "package", "range", "return", "select", "struct", "switch", "type",
        "var",
    }
)

GO_PREDECLARED = frozenset(
    {
        "any", "bool", "byte", "comparable", "complex64", "complex128", "error",
        "float32", "float64", "int", "int8", "int16", "int32", "int64", "rune",
        "string", "uint", "uint8", "uint16", "uint32", "uint64", "uintptr",
        "true", "false", "iota", "nil",
        "append", "cap", "clear", "close", "complex", "copy", "delete", "imag",
        "len", "make", "max", "min", "new", "panic", "print", "println", "real",
        "recover",
    }
)

_INVALID_IDENT_CHARS = re.compile(r"[^\w]", re.UNICODE)


def to_camel_case(value: str) -> str:
    """
    Upper-case the first letter and every letter that follows a separator,
    dropping the separators and any other non-alphanumeric character.
    "pet_store-id" -> "PetStoreId"
    """
    out: list[str] = []
    cap_next = True
    for ch in value.strip(" "):
        if ch.isupper() or ch.isdigit():
            out.append(ch)
        elif ch.islower():
            out.append(ch.upper() if cap_next else ch)
        cap_next = ch in _SEPARATORS
    return "".join(out)


def uppercase_first(value: str) -> str:
    return value[:1].upper() + value[1:]


def schema_name_to_type_name(name: str) -> str:
    if name == "$":
        return "DollarSign"
    name = to_camel_case(name)
    if name and name[0].isdigit():
        name = "N" + name
    return name


def path_to_type_name(path: Sequence[str]) -> str:
    return "_".join(to_camel_case(p) for p in path)


def ref_path_to_obj_name(ref: str) -> str:
    """'#/components/schemas/Pet' -> 'Pet'"""
    return ref.rsplit("/", 1)[-1]


def is_go_keyword(value: str) -> bool:
    return value in GO_KEYWORDS


def is_valid_go_identity(value: str) -> bool:
    if not value or is_go_keyword(value) or value in GO_PREDECLARED:
        return False
    return value.isidentifier()


def sanitize_go_identity(value: str) -> str:
    value = _INVALID_IDENT_CHARS.sub("_", value)
    if value in GO_KEYWORDS or value in GO_PREDECLARED:
        return "_" + value
    if not value.isidentifier():
        return "_" + value
    return value


def sanitize_enum_names(enum_names: Sequence[str], enum_values: Sequence[str]) -> dict[str, str]:
    """
    Map sanitized constant names to enum literals.

    Duplicate names are dropped (first wins); distinct names that sanitize to
    the same identifier get a numeric suffix.
    """
    seen: set[str] = set()
    pairs: list[tuple[str, str]] = []
    for i, value in enumerate(enum_values):
        name = enum_names[i] if i < len(enum_names) else value
        if name not in seen:
            pairs.append((name, value))
        seen.add(name)

    counts: dict[str, int] = {}
    out: dict[str, str] = {}
    for name, value in pairs:
        sanitized = sanitize_go_identity(schema_name_to_type_name(name))
        if sanitized not in counts:
            out[sanitized] = value
        else:
            out[f"{sanitized}{counts[sanitized]}"] = value
        counts[sanitized] = counts.get(sanitized, 0) + 1
    return out


def unique_name(candidate: str, existing: Collection[str]) -> str:
    """
    Return the first of candidate2 .. candidate10 not present in existing.

    An empty string is returned when every probe collides.
    """
    for i in range(2, MAX_RENAME_SUFFIX + 1):
        name = f"{candidate}{i}"
        if name not in existing:
            return name
    return ""


def sorted_schema_keys(properties: Mapping[str, Any]) -> list[str]:
    """
    Property names in output order: names carrying `x-order` first (by that
    value), then the rest alphabetically.
    """

    def order_of(name: str) -> tuple[int, int, str]:
        sref = properties[name]
        node = getattr(sref, "value", None)
        if node is not None:
            order = node.extensions.get(ext.ORDER)
            if isinstance(order, int) and not isinstance(order, bool):
                return (0, order, name)
        return (1, 0, name)

    return sorted(properties, key=order_of)


def string_to_go_comment(text: str) -> str:
    return string_with_type_name_to_go_comment(text, "")


def string_with_type_name_to_go_comment(text: str, type_name: str) -> str:
    if not text:
        return ""
    if type_name:
        text = f"{type_name} {text}"
    lines = text.rstrip("\n").replace("\r\n", "\n").split("\n")
    return "\n".join(("// " + line).rstrip() for line in lines)


def deprecation_comment(reason: str) -> str:
    content = "Deprecated:"
    if reason:
        content += f" {reason}"
    else:
        content += " this property has been marked as deprecated upstream, but no `x-deprecated-reason` was set"
    return string_to_go_comment(content)
