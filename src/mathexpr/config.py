"""Context loading from YAML documents.

A context file defines named constants layered over another context
(the built-ins by default):

    schema_version: "1.0"
    constants:
      g: 9.80665
      tau: 2 * pi          # strings are expressions
      half_tau: tau / 2    # and may use constants defined above

Expression-valued constants are evaluated once, at load time, in document
order, against the constants already defined plus the inner context.

Environment Variables:
    MATHEXPR_CONTEXT: Path of a context file used by ``load_context()``
                      when no explicit path is given.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml

from .context import Context, ContextProvider, BUILTINS, chained
from .evaluator import evaluate
from .parser import parse

__all__ = [
    "MATHEXPR_CONTEXT",
    "context_from_mapping",
    "load_context",
]

logger = logging.getLogger(__name__)

# Environment variable name for the default context file
MATHEXPR_CONTEXT = "MATHEXPR_CONTEXT"


def _is_identifier(name: str) -> bool:
    return (name[:1].isalpha() or name[:1] == "_") and all(
        ch.isalnum() or ch == "_" for ch in name
    )


def context_from_mapping(
    data: Mapping[str, Any],
    inner: Optional[ContextProvider] = None,
    origin: str = "<mapping>",
) -> ContextProvider:
    """Build a context layer from an already-parsed document.

    Args:
        data: Document with ``schema_version`` and ``constants`` keys
        inner: Context the new constants are layered over (defaults to
               the built-ins)
        origin: Description of the source, for error messages

    Returns:
        A chained context: the document's constants, then ``inner``

    Raises:
        ValueError: If the document has an invalid format
        ParseError: If an expression-valued constant is malformed
        EvalError: If an expression-valued constant cannot be evaluated
    """
    if inner is None:
        inner = BUILTINS

    if not isinstance(data, Mapping):
        raise ValueError(f"Invalid context format in {origin}: expected mapping at root")

    schema_version = data.get("schema_version", "1.0")
    if not isinstance(schema_version, str) or not schema_version.startswith("1."):
        raise ValueError(
            f"Unsupported schema version '{schema_version}' in {origin}. "
            f"Expected version 1.x"
        )

    constants = data.get("constants", {})
    if constants is None:
        constants = {}
    if not isinstance(constants, Mapping):
        raise ValueError(f"'constants' in {origin} must be a mapping of name to value")

    layer = Context.empty()
    scope = chained(layer, inner)
    for name, value in constants.items():
        if not isinstance(name, str) or not _is_identifier(name):
            raise ValueError(f"Invalid constant name {name!r} in {origin}")
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            raise ValueError(
                f"Constant '{name}' in {origin} must be a number or an expression string"
            )
        if isinstance(value, str):
            value = evaluate(parse(value), scope)
        layer.with_constant(name, value)

    logger.info("loaded %d constant(s) from %s", len(layer.constants), origin)
    return scope


def load_context(
    path: Optional[Union[str, Path]] = None,
    inner: Optional[ContextProvider] = None,
) -> ContextProvider:
    """Load a context file.

    Args:
        path: YAML file to load. When omitted, the ``MATHEXPR_CONTEXT``
              environment variable is consulted.
        inner: Context the file's constants are layered over (defaults to
               the built-ins)

    Returns:
        The loaded context, or ``inner`` (the built-ins by default) when no
        path is given and the environment variable is unset

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file has an invalid format
    """
    if path is None:
        env_path = os.environ.get(MATHEXPR_CONTEXT, "").strip()
        if not env_path:
            return inner if inner is not None else BUILTINS
        path = env_path

    path = Path(path).expanduser()
    if not path.exists():
        raise FileNotFoundError(f"Context file not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)

    if data is None:
        data = {}

    return context_from_mapping(data, inner, origin=str(path))
