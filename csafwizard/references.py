"""
Cross-section product references: product_status, scores, remediations,
flags and relationships.

Both directions go through the IdCache of the current pass. On export a
reference whose target is missing from the cache (the version was deleted
after being referenced) is dropped; on import every PID is resolved, so a
product named in the tree and in a vulnerability share one internal id.
"""
import logging
from dataclasses import dataclass

from csafwizard import csaf_types as csaf
from csafwizard import model
from csafwizard.csaf_types import PRODUCT_STATUS_BUCKETS
from csafwizard.ids import IdCache, random_id
from csafwizard.scores import cvss_object

log = logging.getLogger(__name__)

RELATIONSHIP_ID_PREFIX = "CSAFRID"


@dataclass
class ResolvedReferences:
    vulnerabilities: list[csaf.Vulnerability]
    relationships: list[csaf.Relationship]


def lookup_pids(product_ids: list[str], id_cache: IdCache, where: str = "") -> list[str]:
    result = []
    for product_id in product_ids:
        pid = id_cache.get(product_id)
        if pid is None:
            log.debug(f"dropping dangling product reference {product_id} {where}".rstrip())
            continue
        result.append(pid)
    return result


def note_out(note: model.Note) -> csaf.Note:
    return csaf.Note(category=note.category, text=note.content, title=note.title)


def note_in(note: csaf.Note) -> model.Note:
    return model.Note(
        id=random_id(),
        category=note.category or "description",
        title=note.title or "",
        content=note.text or "",
    )


# export


def resolve_out(
    vulnerabilities: list[model.Vulnerability],
    relationships: list[model.Relationship],
    id_cache: IdCache,
) -> ResolvedReferences:
    """
    `id_cache` must be the cache the product tree was linearized with.
    Relationships are generated first so that vulnerabilities can refer to
    the combined products they produce.
    """
    csaf_relationships = generate_relationships(relationships, id_cache)
    return ResolvedReferences(
        vulnerabilities=[vulnerability_out(v, id_cache) for v in vulnerabilities],
        relationships=csaf_relationships,
    )


def generate_relationships(
    relationships: list[model.Relationship], id_cache: IdCache
) -> list[csaf.Relationship]:
    result = []
    for r in relationships:
        for source, target in r.version_pairs():
            product_reference = id_cache.get(source)
            relates_to = id_cache.get(target)
            if product_reference is None or relates_to is None:
                log.warning(
                    f"relationship {r.id} ({r.category}) references a missing version, skipping {source} -> {target}"
                )
                continue
            combined = model.combined_product_key(r.id, source, target)
            result.append(
                csaf.Relationship(
                    category=r.category,
                    product_reference=product_reference,
                    relates_to_product_reference=relates_to,
                    full_product_name=csaf.FullProductName(
                        name=r.name,
                        product_id=id_cache.resolve(combined, prefix=RELATIONSHIP_ID_PREFIX),
                    ),
                )
            )
    return result


def product_status_out(
    products: list[model.VulnerabilityProduct], id_cache: IdCache
) -> csaf.ProductStatus:
    status = csaf.ProductStatus()
    for p in products:
        if p.status not in PRODUCT_STATUS_BUCKETS:
            log.warning(f"unknown product status {p.status!r} for {p.product_id}")
            continue
        pid = id_cache.get(p.product_id)
        if pid is None:
            log.debug(f"dropping dangling {p.status} product {p.product_id}")
            continue
        bucket = getattr(status, p.status)
        if pid not in bucket:
            bucket.append(pid)
    return status


def score_out(score: model.Score, id_cache: IdCache) -> csaf.Score:
    key, obj = cvss_object(score.cvss_version, score.vector_string)
    result = csaf.Score(products=lookup_pids(score.product_ids, id_cache, "in score"))
    setattr(result, key, obj)
    return result


def remediation_out(remediation: model.Remediation, id_cache: IdCache) -> csaf.Remediation:
    return csaf.Remediation(
        category=remediation.category,
        date=remediation.date or None,
        details=remediation.details,
        url=remediation.url or None,
        product_ids=lookup_pids(remediation.product_ids, id_cache, "in remediation"),
    )


def flag_out(flag: model.Flag, id_cache: IdCache) -> csaf.Flag:
    return csaf.Flag(
        label=flag.label,
        product_ids=lookup_pids(flag.product_ids, id_cache, "in flag"),
    )


def vulnerability_out(v: model.Vulnerability, id_cache: IdCache) -> csaf.Vulnerability:
    return csaf.Vulnerability(
        cve=v.cve or None,
        title=v.title,
        cwe=csaf.CWE(id=v.cwe.id, name=v.cwe.name) if v.cwe else None,
        notes=[note_out(n) for n in v.notes],
        product_status=product_status_out(v.products, id_cache),
        remediations=[remediation_out(r, id_cache) for r in v.remediations],
        scores=[score_out(s, id_cache) for s in v.scores],
        flags=[flag_out(f, id_cache) for f in v.flags],
    )


# import


def resolve_pids(product_ids: list[str], id_cache: IdCache) -> list[str]:
    return [id_cache.resolve(pid) for pid in product_ids or []]


def parse_vulnerability_products(
    product_status: csaf.ProductStatus | None, id_cache: IdCache
) -> list[model.VulnerabilityProduct]:
    if product_status is None:
        return []
    result = []
    for status, pids in product_status.buckets():
        for pid in pids:
            result.append(
                model.VulnerabilityProduct(
                    id=random_id(),
                    product_id=id_cache.resolve(pid),
                    status=status,
                )
            )
    return result


def score_in(score: csaf.Score, id_cache: IdCache) -> model.Score:
    default = model.Score()
    _, cvss = score.cvss()
    cvss = cvss or {}
    return model.Score(
        cvss_version=cvss.get("version") or default.cvss_version,
        vector_string=cvss.get("vectorString") or default.vector_string,
        product_ids=resolve_pids(score.products, id_cache),
    )


def remediation_in(remediation: csaf.Remediation, id_cache: IdCache) -> model.Remediation:
    default = model.Remediation()
    return model.Remediation(
        category=remediation.category or default.category,
        date=remediation.date,
        details=remediation.details,
        url=remediation.url,
        product_ids=resolve_pids(remediation.product_ids, id_cache),
    )


def vulnerability_in(v: csaf.Vulnerability, id_cache: IdCache) -> model.Vulnerability:
    return model.Vulnerability(
        cve=v.cve or "",
        cwe=model.Cwe(id=v.cwe.id, name=v.cwe.name or "") if v.cwe and v.cwe.id else None,
        title=v.title or "",
        notes=[note_in(n) for n in v.notes or []],
        products=parse_vulnerability_products(v.product_status, id_cache),
        remediations=[remediation_in(r, id_cache) for r in v.remediations or []],
        scores=[score_in(s, id_cache) for s in v.scores or []],
        flags=[
            model.Flag(label=f.label or "", product_ids=resolve_pids(f.product_ids, id_cache))
            for f in v.flags or []
        ],
    )


def resolve_in(
    csaf_vulnerabilities: list[csaf.Vulnerability], id_cache: IdCache
) -> list[model.Vulnerability]:
    """`id_cache` must be the cache the product tree was built with."""
    return [vulnerability_in(v, id_cache) for v in csaf_vulnerabilities or []]


def parse_relationships(
    csaf_relationships: list[csaf.Relationship],
    id_cache: IdCache,
    products: list[model.ProductTreeBranch],
) -> list[model.Relationship]:
    """
    Groups CSAF relationships by category and the products owning both
    endpoints; each CSAF relationship becomes one version pair.
    """
    relationships: list[model.Relationship] = []
    for r in csaf_relationships or []:
        id1 = id_cache.resolve(r.product_reference)
        id2 = id_cache.resolve(r.relates_to_product_reference)
        parent1 = model.parent_branch(id1, products)
        parent2 = model.parent_branch(id2, products)
        if parent1 is None or parent2 is None:
            log.error(
                f"failed to parse csaf relationship {r.product_reference} {r.category} {r.relates_to_product_reference}"
            )
            continue

        relationship = next(
            (
                x
                for x in relationships
                if x.category == r.category
                and x.product_id1 == parent1.id
                and x.product_id2 == parent2.id
            ),
            None,
        )
        if relationship is None:
            relationship = model.Relationship(
                id=random_id(),
                category=r.category or model.Relationship().category,
                product_id1=parent1.id,
                product_id2=parent2.id,
                name=r.full_product_name.name or "" if r.full_product_name else "",
            )
            relationships.append(relationship)
        if id1 not in relationship.product1_version_ids:
            relationship.product1_version_ids.append(id1)
        if id2 not in relationship.product2_version_ids:
            relationship.product2_version_ids.append(id2)

        combined_pid = r.full_product_name.product_id if r.full_product_name else None
        if combined_pid:
            id_cache.bind(combined_pid, model.combined_product_key(relationship.id, id1, id2))
    return relationships
