import logging
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from storefront.rules.models import Rules

logger = logging.getLogger(__name__)

# Rules may live inside a markdown document as a ```yaml fenced block
_YAML_FENCE = re.compile(r"^\s*```ya?ml[^\n]*\n(.*?)^\s*```", re.MULTILINE | re.DOTALL)


def _extract_yaml(content: str) -> str:
    """Return the first yaml fenced block, or the whole text if there is none."""
    match = _YAML_FENCE.search(content)
    return match.group(1) if match else content


def load_rules(path: Path) -> Rules:
    """
    Load and validate the rules file.
    Raises FileNotFoundError if file missing.
    Raises ValueError if the YAML or the schema is invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found at: {path}")

    content = path.read_text(encoding="utf-8")

    try:
        data = yaml.safe_load(_extract_yaml(content))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in rules file: {e}") from e

    try:
        rules = Rules.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Rules validation failed:\n{e}") from e

    logger.info("Rules %s loaded from %s", rules.project.rules_version, path)
    return rules
