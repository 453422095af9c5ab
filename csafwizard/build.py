import logging
from dataclasses import dataclass

from csafwizard.csaf_types import Branch
from csafwizard.families import TaggedBranch, extract_families
from csafwizard.ids import IdCache
from csafwizard.model import (
    ProductFamily,
    ProductTreeBranch,
    default_branch_name,
    default_product_tree_branch,
)

log = logging.getLogger(__name__)


@dataclass
class ProductTreeParseResult:
    products: list[ProductTreeBranch]
    families: list[ProductFamily]


def build_product_tree(csaf_branches: list[Branch], id_cache: IdCache) -> ProductTreeParseResult:
    """
    Editing-model product tree for nested CSAF branches.

    Family wrappers are stripped first; the product_name branches below them
    come back with familyId set. Every product_id is registered in
    `id_cache`, so vulnerabilities and relationships resolved afterwards in
    the same pass land on the same internal ids.
    """
    extraction = extract_families(csaf_branches or [])
    products = [_convert(t, id_cache) for t in extraction.tagged]
    return ProductTreeParseResult(products=products, families=extraction.families)


def _convert(tagged: TaggedBranch, id_cache: IdCache) -> ProductTreeBranch:
    b = tagged.branch
    default = default_product_tree_branch(b.category)
    product = b.product
    if product and b.category != "product_version":
        log.debug(
            f"{b.category} branch {b.name!r} carries product {product.product_id}; "
            "only product_version branches export a product, references to it will be dropped"
        )
    return ProductTreeBranch(
        id=id_cache.resolve(product.product_id if product else None),
        category=b.category,
        name=b.name or default_branch_name(b.category),
        product_name=product.name if product else None,
        description=product.name if product and product.name is not None else default.description,
        identification_helper=product.product_identification_helper if product else None,
        family_id=tagged.family_id,
        type=default.type,
        sub_branches=[_convert(t, id_cache) for t in tagged.branches],
    )
