"""Reader -- load OpenAPI documents and decode them into raw descriptions.

Typical usage::

    from specir.reader import load_document, read_description, validate_openapi_version

    document = load_document("https://petstore3.swagger.io/api/v3/openapi.json")
    validate_openapi_version(document)
    description = read_description(document)

Sub-modules:

* :mod:`~specir.reader.loader` -- I/O layer (URL, file, stdin) plus format
  detection and OpenAPI version validation.
* :mod:`~specir.reader.pointer` -- JSON Pointer helpers for ``$ref``.
* :mod:`~specir.reader.builder` -- walks the document and builds the raw
  node graph and schema registry.
"""

from specir.reader.builder import read_description
from specir.reader.loader import load_document, validate_openapi_version

__all__ = ["load_document", "read_description", "validate_openapi_version"]
