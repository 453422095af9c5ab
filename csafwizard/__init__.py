__version__ = "0.1.0"

from csafwizard.document import (  # noqa: E402
    ImportResult,
    create_csaf_document,
    import_csaf_document,
    parse_csaf_document,
    retrieve_latest_version,
)
from csafwizard.ids import IdCache  # noqa: E402
from csafwizard.model import Snapshot  # noqa: E402
from csafwizard.scheme import (  # noqa: E402
    get_csaf_version,
    is_csaf_document,
    is_csaf_version_supported,
)
