"""
Generation options, loaded from a YAML/JSON configuration file.

Example:

    package: petstore
    output-options:
      include-tags: [pets]
      nullable-type: true
    compatibility:
      old-merge-schemas: false
    import-mapping:
      common.yaml: github.com/acme/common
"""

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Union

import yaml

from oapi_typegen.errors import ConfigError

# Maps an import-mapping target to "the package being generated".
CURRENT_PACKAGE = "-"


@dataclass
class OutputOptions:
    include_tags: list[str] = field(default_factory=list)
    exclude_tags: list[str] = field(default_factory=list)
    include_operation_ids: list[str] = field(default_factory=list)
    exclude_operation_ids: list[str] = field(default_factory=list)
    skip_prune: bool = False
    prefer_skip_optional_pointer: bool = False
    prefer_skip_optional_pointer_on_container_types: bool = False
    prefer_skip_optional_pointer_with_omitzero: bool = False
    nullable_type: bool = False
    enable_yaml_tags: bool = False
    disable_type_aliases_for_type: list[str] = field(default_factory=list)


@dataclass
class CompatibilityOptions:
    old_merge_schemas: bool = False
    old_enum_conflicts: bool = False
    old_aliasing: bool = False
    disable_flatten_additional_properties: bool = False
    disable_required_readonly_as_pointer: bool = False
    always_prefix_enum_values: bool = False
    allow_unexported_struct_field_names: bool = False


@dataclass(frozen=True)
class GoImport:
    name: str
    path: str


@dataclass
class Configuration:
    package: str = "api"
    output_options: OutputOptions = field(default_factory=OutputOptions)
    compatibility: CompatibilityOptions = field(default_factory=CompatibilityOptions)
    import_mapping: dict[str, str] = field(default_factory=dict)

    def with_overrides(self, **output_options: Any) -> "Configuration":
        """Copy with the given output options replaced (None values are ignored)."""
        changes = {k: v for k, v in output_options.items() if v is not None}
        return replace(self, output_options=replace(self.output_options, **changes))

    def external_imports(self) -> dict[str, GoImport]:
        """
        Resolve import-mapping entries to Go imports.

        Each distinct package path gets an `externalRefN` alias, numbered in
        sorted path order; entries mapped to "-" refer to the package being
        generated.
        """
        aliases: dict[str, str] = {}
        for package_path in sorted(set(self.import_mapping.values())):
            if package_path != CURRENT_PACKAGE:
                aliases[package_path] = f"externalRef{len(aliases)}"
        out: dict[str, GoImport] = {}
        for spec_path, package_path in self.import_mapping.items():
            if package_path == CURRENT_PACKAGE:
                out[spec_path] = GoImport(name="", path="")
            else:
                out[spec_path] = GoImport(name=aliases[package_path], path=package_path)
        return out


def _field_names(cls: type) -> dict[str, str]:
    """kebab-case config key -> dataclass attribute."""
    return {f.name.replace("_", "-"): f.name for f in fields(cls)}


def _normalize_string_list(values: Any, *, label: str) -> list[str]:
    if values is None:
        return []
    if not isinstance(values, list):
        raise ConfigError(f"Config {label} must be a list of strings.")
    out: list[str] = []
    for v in values:
        if v is None:
            continue
        if not isinstance(v, str):
            raise ConfigError(f"Config {label} must be a list of strings.")
        v = v.strip()
        if v:
            out.append(v)
    return out


def _parse_section(cls: type, raw: Any, *, label: str) -> Any:
    if raw is None:
        return cls()
    if not isinstance(raw, dict):
        raise ConfigError(f"Config {label} must be an object.")
    known = _field_names(cls)
    defaults = cls()
    kwargs: dict[str, Any] = {}
    for key, value in raw.items():
        attr = known.get(str(key))
        if attr is None:
            raise ConfigError(f"Unknown config key {label}.{key}.")
        if isinstance(getattr(defaults, attr), bool):
            if not isinstance(value, bool):
                raise ConfigError(f"Config {label}.{key} must be a boolean.")
            kwargs[attr] = value
        else:
            kwargs[attr] = _normalize_string_list(value, label=f"{label}.{key}")
    return cls(**kwargs)


def parse_config(raw: Any) -> Configuration:
    if raw is None:
        return Configuration()
    if not isinstance(raw, dict):
        raise ConfigError(f"Config must be an object at top-level (got {type(raw).__name__}).")

    allowed = {"package", "output-options", "compatibility", "import-mapping"}
    unknown = sorted(str(k) for k in raw if k not in allowed)
    if unknown:
        raise ConfigError(f"Unknown config key(s): {', '.join(unknown)}.")

    package = raw.get("package", "api")
    if not isinstance(package, str) or not package.isidentifier():
        raise ConfigError(f"Config package must be a valid Go package name (got {package!r}).")

    mapping = raw.get("import-mapping") or {}
    if not isinstance(mapping, dict) or not all(isinstance(v, str) and v for v in mapping.values()):
        raise ConfigError("Config import-mapping must map spec paths to Go import paths.")

    return Configuration(
        package=package,
        output_options=_parse_section(OutputOptions, raw.get("output-options"), label="output-options"),
        compatibility=_parse_section(CompatibilityOptions, raw.get("compatibility"), label="compatibility"),
        import_mapping={str(k): v for k, v in mapping.items()},
    )


def load_config(path: Union[str, Path]) -> Configuration:
    path = Path(path)
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Failed to read config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse config {path}: {e}") from e
    return parse_config(raw)
