"""
YAML loading with environment variable placeholders.

Any string value may reference ``${NAME}`` (required) or ``${NAME:default}``.
A value consisting of a single placeholder is converted to bool, int or float
when the substituted text looks like one, so ``interval_ms: ${TICK_MS:1000}``
yields an integer.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Union

import yaml

logger = logging.getLogger(__name__)

Scalar = Union[str, int, float, bool]


class ConfigLoader:
    """Reads a YAML mapping and resolves environment placeholders in it."""

    ENV_VAR_PATTERN = re.compile(r'\$\{([^}:]+)(?::([^}]*))?\}')

    @classmethod
    def load_yaml(cls, path: Union[str, Path]) -> Dict[str, Any]:
        """
        Load ``path`` and substitute placeholders.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the document is empty or not a mapping, or a
                required variable is unset
            yaml.YAMLError: If the file is not valid YAML
        """
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        document = yaml.safe_load(path.read_text(encoding='utf-8'))
        if document is None:
            raise ValueError(f"Configuration file is empty: {path}")
        if not isinstance(document, dict):
            raise ValueError(f"Configuration root must be a mapping, got {type(document).__name__}: {path}")

        logger.debug("Loaded configuration", extra={"config_path": str(path)})
        return cls.resolve(document)

    @classmethod
    def resolve(cls, node: Any) -> Any:
        """Substitute placeholders throughout nested dicts and lists."""
        if isinstance(node, dict):
            return {key: cls.resolve(value) for key, value in node.items()}
        if isinstance(node, list):
            return [cls.resolve(item) for item in node]
        if isinstance(node, str):
            return cls._substitute(node)
        return node

    @classmethod
    def _substitute(cls, value: str) -> Scalar:
        def lookup(match: "re.Match") -> str:
            name, default = match.group(1).strip(), match.group(2)
            resolved = os.getenv(name, default)
            if resolved is None:
                raise ValueError(f"Required environment variable not set: {name}")
            return resolved.strip()

        substituted = cls.ENV_VAR_PATTERN.sub(lookup, value)
        if cls.ENV_VAR_PATTERN.fullmatch(value):
            return cls._coerce(substituted)
        return substituted

    @staticmethod
    def _coerce(text: str) -> Scalar:
        """'true'/'false' → bool, integers → int, other numbers → float."""
        lowered = text.lower()
        if lowered in ('true', 'false'):
            return lowered == 'true'
        for convert in (int, float):
            try:
                return convert(text)
            except ValueError:
                continue
        return text
