"""Load OpenAPI documents from a URL, a local file, or stdin.

Both JSON and YAML are accepted. The format is taken from the file suffix or
the response ``content-type`` when available and otherwise detected by
trying JSON first, then YAML (every JSON document is also valid YAML, but
the JSON parser is stricter and faster).

The two public functions are:

* :func:`load_document` -- fetch and parse a document into a dict.
* :func:`validate_openapi_version` -- accept OpenAPI 3.x, reject the rest.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from specir.exceptions import DescriptionError

logger = logging.getLogger(__name__)

_SUFFIX_HINTS = {".json": "json", ".yaml": "yaml", ".yml": "yaml"}


def load_document(source: str) -> dict[str, Any]:
    """Load an OpenAPI document from *source*.

    Args:
        source: An ``http(s)://`` URL, a file path, or ``-`` for stdin.

    Returns:
        The parsed document.

    Raises:
        DescriptionError: If the source cannot be read or parsed.
    """
    if source == "-":
        content, hint = _read_stdin(), ""
    elif source.startswith(("http://", "https://")):
        content, hint = _read_url(source)
    else:
        content, hint = _read_file(source)

    if not content.strip():
        raise DescriptionError(f"API description is empty: {source}")

    logger.debug("Loaded %d bytes from %s (hint=%r)", len(content), source, hint)
    return _parse(content, hint)


def _read_stdin() -> str:
    try:
        return sys.stdin.read()
    except OSError as exc:
        raise DescriptionError(f"Failed to read from stdin: {exc}") from exc


def _read_url(url: str) -> tuple[str, str]:
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise DescriptionError(
            f"HTTP {exc.response.status_code} fetching description from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise DescriptionError(f"Failed to fetch description from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"
    return response.text, hint


def _read_file(path: str) -> tuple[str, str]:
    file_path = Path(path)
    if not file_path.is_file():
        raise DescriptionError(f"Description file not found: {path}")
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DescriptionError(f"Failed to read description file {path}: {exc}") from exc
    return content, _SUFFIX_HINTS.get(file_path.suffix.lower(), "")


def _parse(content: str, hint: str) -> dict[str, Any]:
    """Parse *content* as JSON or YAML according to *hint* ('json', 'yaml' or '')."""
    errors: list[str] = []

    if hint != "yaml":
        try:
            return _require_mapping(json.loads(content))
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise DescriptionError(f"Invalid JSON: {exc}") from exc
            errors.append(f"JSON error: {exc}")

    try:
        return _require_mapping(yaml.safe_load(content))
    except yaml.YAMLError as exc:
        errors.append(f"YAML error: {exc}")

    raise DescriptionError(
        "Failed to parse description as JSON or YAML\n  " + "\n  ".join(errors)
    )


def _require_mapping(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise DescriptionError(f"API description must be a JSON/YAML object (got {kind})")
    return result


def validate_openapi_version(document: dict[str, Any]) -> str:
    """Return the ``openapi`` version string of *document*.

    Raises:
        DescriptionError: For Swagger 2.x documents, a missing ``openapi``
            field, or a major version other than 3.
    """
    if "swagger" in document:
        raise DescriptionError(
            f"Swagger {document['swagger']} is not supported. "
            "Only OpenAPI 3.0.x and 3.1.x are supported."
        )

    version = document.get("openapi")
    if version is None:
        raise DescriptionError("Missing 'openapi' field. Is this an OpenAPI 3.x document?")

    version_str = str(version)
    if not version_str.startswith("3."):
        raise DescriptionError(
            f"Unsupported OpenAPI version: {version_str}. "
            "Only OpenAPI 3.0.x and 3.1.x are supported."
        )
    if not version_str.startswith(("3.0.", "3.1.")):
        logger.warning("OpenAPI %s is newer than 3.1; processing anyway", version_str)
    return version_str
