import textwrap

import pytest

from oapi_typegen.compiler import SchemaCompiler
from oapi_typegen.config import Configuration
from oapi_typegen.generate import generate, render_declarations
from oapi_typegen.loader import load_document_from_data
from oapi_typegen.resolver import ReferenceResolver

HEADER = """\
openapi: 3.0.3
info:
  title: test
  version: "1"
"""


@pytest.fixture
def load():
    """Load a YAML document; the openapi/info header is added when missing."""

    def _load(text, **kwargs):
        text = textwrap.dedent(text)
        if "openapi:" not in text:
            text = HEADER + text
        return load_document_from_data(text, **kwargs)

    return _load


@pytest.fixture
def config():
    return Configuration(package="api")


@pytest.fixture
def keep_all(config):
    return config.with_overrides(skip_prune=True)


@pytest.fixture
def render(load, keep_all):
    """Generate Go source for a document, keeping unreferenced components by default."""

    def _render(text, cfg=None, **kwargs):
        cfg = cfg or keep_all
        return render_declarations(generate(load(text, **kwargs), cfg), cfg)

    return _render


@pytest.fixture
def compiler_for():
    def _compiler_for(document, cfg=None):
        cfg = cfg or Configuration()
        return SchemaCompiler(ReferenceResolver(document, cfg), cfg)

    return _compiler_for
