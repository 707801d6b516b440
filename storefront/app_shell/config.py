import logging
import os

from storefront.components.forms.models import FORM_SCHEMAS, FormsConfig
from storefront.domain.sanitize import SanitizerConfig
from storefront.rules.models import Rules

logger = logging.getLogger(__name__)


def validate_ops_rules(rules: Rules) -> None:
    """
    Validate operational requirements before startup.

    Exits the process when a required environment variable is missing or
    the rules enable a form type this build does not know.
    """
    missing = [name for name in rules.ops.required_env if name not in os.environ]
    if missing:
        logger.critical("Missing required environment variables: %s", ", ".join(missing))
        raise SystemExit(1)

    unknown = sorted(set(rules.forms.enabled_types) - set(FORM_SCHEMAS))
    if unknown:
        logger.critical("Unknown form types enabled in rules: %s", ", ".join(unknown))
        raise SystemExit(1)

    logger.info("Configuration validated")


def sanitizer_config(rules: Rules) -> SanitizerConfig:
    return SanitizerConfig.from_rules(rules.sanitizer)


def forms_config(rules: Rules) -> FormsConfig:
    return FormsConfig(
        gdpr_consent_version=rules.forms.gdpr_consent_version,
        enabled_types=frozenset(rules.forms.enabled_types),
    )
