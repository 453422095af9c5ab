"""
Product families: a forest of ProductFamily records (editing model) versus
nested `product_family` branches wrapped around products (CSAF).
"""
import logging
from dataclasses import dataclass, field

from csafwizard.csaf_types import Branch
from csafwizard.ids import random_id
from csafwizard.model import ProductFamily

log = logging.getLogger(__name__)


@dataclass
class TaggedBranch:
    """A CSAF branch with family wrappers removed from below it."""

    branch: Branch
    family_id: str | None = None
    branches: list["TaggedBranch"] = field(default_factory=list)


@dataclass
class FamilyExtraction:
    families: list[ProductFamily]
    tagged: list[TaggedBranch]


def family_chain(family_id: str | None, families: list[ProductFamily]) -> list[ProductFamily]:
    """
    Ancestor list of a family, starting with the family itself and ending
    with its root. Unknown ids yield an empty chain.
    """
    by_id = {f.id: f for f in families}
    chain = []
    here = by_id.get(family_id) if family_id else None
    while here:
        chain.append(here)
        here = by_id.get(here.parent) if here.parent else None
    return chain


def attach_family(
    product_branch: Branch, family_id: str | None, families: list[ProductFamily]
) -> Branch:
    chain = family_chain(family_id, families)
    if not chain:
        if family_id:
            log.debug(f"family {family_id} not found, exporting product unwrapped")
        return product_branch

    wrapped = product_branch
    # chain runs leaf-to-root, so the root ends up outermost
    for family in chain:
        wrapped = Branch(category="product_family", name=family.name, branches=[wrapped])
    return wrapped


def extract_families(branches: list[Branch]) -> FamilyExtraction:
    families: dict[tuple[str, ...], ProductFamily] = {}
    tagged = _extract(branches, families, position=(), enclosing=None)
    return FamilyExtraction(families=list(families.values()), tagged=tagged)


def _extract(
    branches: list[Branch],
    families: dict[tuple[str, ...], ProductFamily],
    position: tuple[str, ...],
    enclosing: ProductFamily | None,
) -> list[TaggedBranch]:
    result = []
    for b in branches:
        here = position + (b.name or "",)
        if b.category == "product_family":
            family = families.get(here)
            if family is None:
                family = ProductFamily(
                    id=random_id(),
                    name=b.name or "",
                    parent=enclosing.id if enclosing else None,
                )
                families[here] = family
            # splice the children in place of the wrapper
            result.extend(_extract(b.children(), families, here, family))
            continue

        family_id = None
        if b.category == "product_name" and enclosing:
            family_id = enclosing.id
        result.append(
            TaggedBranch(
                branch=b,
                family_id=family_id,
                branches=_extract(b.children(), families, here, enclosing),
            )
        )
    return result
