from csafwizard.csaf_types import Branch, Product
from csafwizard.families import attach_family
from csafwizard.ids import IdCache
from csafwizard.model import ProductFamily, ProductTreeBranch


def full_product_name(names: list[str]) -> str:
    return " ".join(n for n in names if n)


def linearize(
    vendor_branches: list[ProductTreeBranch],
    families: list[ProductFamily],
    id_cache: IdCache,
) -> list[Branch]:
    """
    Nested CSAF branches for the editing-model product tree.

    Every product_version gets its product_id from `id_cache`, keyed by the
    branch id, so references resolved later in the same pass agree with the
    tree. Products that belong to a family are wrapped in their family chain.
    """
    return _linearize(vendor_branches, families, id_cache, [])


def _linearize(
    branches: list[ProductTreeBranch],
    families: list[ProductFamily],
    id_cache: IdCache,
    ancestors: list[str],
) -> list[Branch]:
    result = []
    for b in branches:
        names = ancestors + [b.name]
        csaf_branch = Branch(category=b.category, name=b.name)
        if b.sub_branches:
            csaf_branch.branches = _linearize(b.sub_branches, families, id_cache, names)
        if b.category == "product_version":
            # product.name is the only wire field for the description
            csaf_branch.product = Product(
                name=b.description or b.product_name or full_product_name(names),
                product_id=id_cache.resolve(b.id),
                product_identification_helper=b.identification_helper,
            )
        if b.category == "product_name" and b.family_id:
            csaf_branch = attach_family(csaf_branch, b.family_id, families)
        result.append(csaf_branch)
    return result
