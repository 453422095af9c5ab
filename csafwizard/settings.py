import json
import logging
import os
from dataclasses import dataclass, field

from dataclasses_json import dataclass_json

from csafwizard import __version__

log = logging.getLogger(__name__)

CONFIG_ENV = "CSAF_WIZARD_CONFIG"

SUPPORTED_CSAF_VERSIONS = ["2.0"]


@dataclass_json
@dataclass
class ExportSettings:
    engine_name: str = "Sec-O-Simple"
    engine_version: str = __version__
    document_category: str = "csaf_security_advisory"
    csaf_version: str = "2.0"
    pid_prefix: str = "CSAFPID"
    # append one "description" note per described product
    product_description_notes: bool = False
    product_description: dict[str, str] = field(
        default_factory=lambda: {
            "en": "Product description for",
            "de": "Produktbeschreibung für",
        }
    )
    supported_csaf_versions: list[str] = field(
        default_factory=lambda: list(SUPPORTED_CSAF_VERSIONS)
    )


def load_settings(path: str | None = None) -> ExportSettings:
    """
    Settings from a JSON file (default: the file named by $CSAF_WIZARD_CONFIG).
    A missing or unreadable file falls back to the defaults.
    """
    path = path or os.getenv(CONFIG_ENV)
    if not path:
        return ExportSettings()
    try:
        with open(path) as fh:
            return ExportSettings.from_dict(json.load(fh))
    except (OSError, ValueError, TypeError) as e:
        log.error(
            f"failed to load configuration from {path} ({e.__class__.__name__}), falling back to defaults"
        )
        return ExportSettings()
