"""
Whole-document export and import.

Each call owns exactly one IdCache: the product tree and every section that
references products are resolved through it, so a version and the places
that reference it always agree on one id.
"""
import copy
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone

from packaging.version import InvalidVersion, Version

from csafwizard import csaf_types as csaf
from csafwizard import model
from csafwizard.build import build_product_tree
from csafwizard.ids import IdCache, random_id
from csafwizard.linearize import linearize
from csafwizard.references import note_in, note_out, parse_relationships, resolve_in, resolve_out
from csafwizard.scheme import WIZARD_SCHEME, find_mismatches, get_csaf_version, is_csaf_document
from csafwizard.settings import ExportSettings

log = logging.getLogger(__name__)

# fields generated from the editing model; everything else in an imported
# document is carried over on export
DOCUMENT_FIELDS = {
    "category",
    "csaf_version",
    "lang",
    "title",
    "publisher",
    "tracking",
    "notes",
    "references",
    "acknowledgments",
}
PUBLISHER_FIELDS = {
    "category",
    "contact_details",
    "issuing_authority",
    "name",
    "namespace",
}
TRACKING_FIELDS = {
    "id",
    "status",
    "version",
    "current_release_date",
    "initial_release_date",
    "revision_history",
    "generator",
}
REVISION_FIELDS = {"date", "number", "summary"}
VULNERABILITY_FIELDS = {
    "cve",
    "title",
    "cwe",
    "notes",
    "product_status",
    "remediations",
    "scores",
    "flags",
}


@dataclass
class ImportResult:
    snapshot: model.Snapshot
    # external PID -> internal id, as filled during the import pass
    id_cache: IdCache

    def export_id_cache(self, settings: ExportSettings | None = None) -> IdCache:
        """Seed cache for re-exporting the snapshot with its imported PIDs."""
        settings = settings or ExportSettings()
        return self.id_cache.inverted(settings.pid_prefix)


# export


def _parse_date(value: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return datetime.min.replace(tzinfo=timezone.utc)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _version_key(number: str) -> Version:
    try:
        return Version(number)
    except (InvalidVersion, TypeError):
        match = re.match(r"\d+", number or "")
        return Version(match.group(0)) if match else Version("0")


def retrieve_latest_version(history: list[model.RevisionHistoryEntry]) -> str:
    """
    Version number of the most recent revision: latest date first, the
    higher version number among revisions of the same date.
    """
    if not history:
        raise ValueError("Revision history is empty, cannot retrieve latest version.")

    latest = max(history, key=lambda e: (_parse_date(e.date), _version_key(e.number)))
    return latest.number


def product_description_notes(
    snapshot: model.Snapshot, settings: ExportSettings
) -> list[csaf.Note]:
    lang = snapshot.document_information.language
    texts = settings.product_description
    prefix = texts.get(lang) or texts.get("en", "")
    result = []
    for vendor in snapshot.products:
        for product in vendor.sub_branches:
            if not product.description:
                continue
            result.append(
                csaf.Note(
                    category="description",
                    text=product.description,
                    title=f"{prefix} {product.name}",
                )
            )
    return result


def acknowledgment_out(ack: model.Acknowledgment) -> csaf.Acknowledgment:
    return csaf.Acknowledgment(
        organization=ack.organization or None,
        summary=ack.summary or None,
        names=[n.name for n in ack.names],
        urls=[ack.url] if ack.url else [],
    )


def tracking_out(info: model.DocumentInformation, settings: ExportSettings, now: str) -> csaf.Tracking:
    history = info.revision_history
    return csaf.Tracking(
        id=info.id,
        status=info.status,
        version=retrieve_latest_version(history) if history else "1",
        current_release_date=(history[-1].date if history else "") or now,
        initial_release_date=(history[0].date if history else "") or now,
        revision_history=[
            csaf.RevisionEntry(date=e.date, number=e.number, summary=e.summary)
            for e in history
        ],
        generator=csaf.Generator(
            date=now,
            engine=csaf.GeneratorEngine(
                name=settings.engine_name, version=settings.engine_version
            ),
        ),
    )


def document_out(snapshot: model.Snapshot, settings: ExportSettings, now: str) -> csaf.Document:
    info = snapshot.document_information
    publisher = info.publisher
    notes = [note_out(n) for n in info.notes]
    if settings.product_description_notes:
        notes.extend(product_description_notes(snapshot, settings))
    return csaf.Document(
        category=settings.document_category,
        csaf_version=settings.csaf_version,
        lang=info.language,
        title=info.title,
        publisher=csaf.Publisher(
            category=publisher.category,
            contact_details=publisher.contact_details,
            issuing_authority=publisher.issuing_authority or None,
            name=publisher.name,
            namespace=publisher.namespace,
        ),
        tracking=tracking_out(info, settings, now),
        notes=notes,
        references=[
            csaf.Reference(category=r.category, summary=r.summary, url=r.url)
            for r in info.references
        ],
        acknowledgments=[acknowledgment_out(a) for a in info.acknowledgments],
    )


def merge_unowned(imported, generated: dict, owned: set[str]) -> dict:
    """`generated` plus the fields of `imported` the editing model does not own."""
    if not isinstance(imported, dict):
        return generated
    result = {k: copy.deepcopy(v) for k, v in imported.items() if k not in owned}
    result.update(generated)
    return result


def _take_match(candidates: list[dict], generated: dict, key: str) -> dict | None:
    value = generated.get(key)
    if not value:
        return None
    for i, candidate in enumerate(candidates):
        if candidate.get(key) == value:
            return candidates.pop(i)
    return None


def merge_revision_history(imported, generated: list[dict]) -> list[dict]:
    """Imported revisions are matched by number; each is used at most once."""
    if not isinstance(imported, list):
        return generated
    candidates = [e for e in imported if isinstance(e, dict)]
    return [
        merge_unowned(_take_match(candidates, e, "number"), e, REVISION_FIELDS)
        for e in generated
    ]


def merge_document(imported, generated: dict) -> dict:
    result = merge_unowned(imported, generated, DOCUMENT_FIELDS)
    if not isinstance(imported, dict):
        return result
    if "publisher" in result:
        result["publisher"] = merge_unowned(
            imported.get("publisher"), result["publisher"], PUBLISHER_FIELDS
        )
    tracking = imported.get("tracking")
    if "tracking" in result:
        result["tracking"] = merge_unowned(tracking, result["tracking"], TRACKING_FIELDS)
        if isinstance(tracking, dict) and "revision_history" in result["tracking"]:
            result["tracking"]["revision_history"] = merge_revision_history(
                tracking.get("revision_history"), result["tracking"]["revision_history"]
            )
    return result


def merge_vulnerabilities(imported, generated: list[dict]) -> list[dict]:
    """
    Imported vulnerabilities are matched by CVE. One without a CVE only
    matches an imported vulnerability without a CVE and the same title;
    unmatched vulnerabilities get no imported fields.
    """
    if not isinstance(imported, list):
        return generated
    with_cve = [v for v in imported if isinstance(v, dict) and v.get("cve")]
    without_cve = [v for v in imported if isinstance(v, dict) and not v.get("cve")]
    result = []
    for v in generated:
        if v.get("cve"):
            match = _take_match(with_cve, v, "cve")
        else:
            match = _take_match(without_cve, v, "title")
        result.append(merge_unowned(match, v, VULNERABILITY_FIELDS))
    return result


def create_csaf_document(
    snapshot: model.Snapshot,
    id_cache: IdCache | None = None,
    settings: ExportSettings | None = None,
    now: str | None = None,
) -> dict:
    """
    CSAF document for an editing-model snapshot.

    Pass `id_cache` only to seed PIDs (see IdCache.inverted); it must be a
    cache no other pass uses. The product tree is always generated in full;
    `document` and `vulnerabilities` are merged over the originally imported
    document so fields the editing model does not carry survive.
    """
    settings = settings or ExportSettings()
    if id_cache is None:
        id_cache = IdCache(prefix=settings.pid_prefix)
    now = now or datetime.now(timezone.utc).isoformat()

    branches = linearize(snapshot.products, snapshot.families, id_cache)
    resolved = resolve_out(snapshot.vulnerabilities, snapshot.relationships, id_cache)

    c = csaf.CSAF_JSON(
        document=document_out(snapshot, settings, now),
        product_tree=csaf.ProductTree(
            branches=branches, relationships=resolved.relationships
        ),
        vulnerabilities=resolved.vulnerabilities,
    )
    result = c.to_json_dict()

    imported = snapshot.imported_csaf_document
    if imported:
        result["document"] = merge_document(imported.get("document"), result.get("document", {}))
        if "vulnerabilities" in result:
            result["vulnerabilities"] = merge_vulnerabilities(
                imported.get("vulnerabilities"), result["vulnerabilities"]
            )
    return result


# import


def document_information_in(d: csaf.Document) -> model.DocumentInformation:
    default = model.DocumentInformation()
    tracking = d.tracking or csaf.Tracking()
    publisher = d.publisher or csaf.Publisher()
    default_publisher = default.publisher
    return model.DocumentInformation(
        id=tracking.id or default.id,
        language=d.lang or default.language,
        status=tracking.status or default.status,
        title=d.title or default.title,
        revision_history=[
            model.RevisionHistoryEntry(
                id=random_id(),
                date=r.date or "",
                number=r.number or "",
                summary=r.summary or "",
            )
            for r in tracking.revision_history or []
        ],
        publisher=model.Publisher(
            name=publisher.name or default_publisher.name,
            category=publisher.category or default_publisher.category,
            namespace=publisher.namespace or default_publisher.namespace,
            contact_details=publisher.contact_details or default_publisher.contact_details,
            issuing_authority=publisher.issuing_authority or default_publisher.issuing_authority,
        ),
        notes=[note_in(n) for n in d.notes or []],
        references=[
            model.Reference(
                id=random_id(),
                category=r.category or "external",
                summary=r.summary or "",
                url=r.url or "",
            )
            for r in d.references or []
        ],
        acknowledgments=[
            model.Acknowledgment(
                id=random_id(),
                organization=a.organization,
                summary=a.summary or "",
                names=[model.AcknowledgmentName(id=random_id(), name=n) for n in a.names or []],
                url=a.urls[0] if a.urls else None,
            )
            for a in d.acknowledgments or []
        ],
    )


def parse_csaf_document(document_object: dict) -> ImportResult:
    """
    Editing-model snapshot for a CSAF document. Lenient: partial documents
    import with defaults, dangling references are kept as they are.
    """
    mismatches = find_mismatches(document_object, WIZARD_SCHEME)
    if mismatches:
        log.debug(f"document differs from wizard scheme: {mismatches}")

    c = csaf.from_document(document_object)
    id_cache = IdCache()

    tree = build_product_tree(c.product_tree.branches, id_cache)
    relationships = parse_relationships(
        c.product_tree.relationships, id_cache, tree.products
    )
    vulnerabilities = resolve_in(c.vulnerabilities, id_cache)

    snapshot = model.Snapshot(
        document_information=document_information_in(c.document),
        products=tree.products,
        families=tree.families,
        relationships=relationships,
        vulnerabilities=vulnerabilities,
        imported_csaf_document=copy.deepcopy(document_object),
    )
    return ImportResult(snapshot=snapshot, id_cache=id_cache)


def import_csaf_document(document_object) -> ImportResult | None:
    """None when `document_object` is not a CSAF document at all."""
    if not is_csaf_document(document_object):
        log.info("not a CSAF document: document.csaf_version is missing")
        return None
    log.debug(f"importing CSAF {get_csaf_version(document_object)} document")
    return parse_csaf_document(document_object)
