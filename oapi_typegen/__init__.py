"""Generate Go type declarations from OpenAPI 3.0/3.1 documents."""

from oapi_typegen.config import Configuration, load_config, parse_config
from oapi_typegen.errors import CodegenError
from oapi_typegen.generate import GenerationResult, generate, render_declarations
from oapi_typegen.loader import load_document, load_document_from_data

__all__ = [
    "CodegenError",
    "Configuration",
    "GenerationResult",
    "generate",
    "load_config",
    "load_document",
    "load_document_from_data",
    "parse_config",
    "render_declarations",
]
