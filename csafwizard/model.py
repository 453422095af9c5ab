"""
Editing model: the flat records the wizard binds its forms to.

Records serialize with camelCase keys (the state store format). Every
record carries an internally generated id; references between records
(familyId, productId, relationship endpoints) are plain id strings.
"""
from dataclasses import dataclass, field
from dataclasses_json import dataclass_json, LetterCase, config

from csafwizard.ids import random_id


BRANCH_CATEGORIES = ("vendor", "product_name", "product_version", "product_family")

DEFAULT_BRANCH_NAMES = {
    "vendor": "Unnamed vendor",
    "product_family": "Unnamed product family",
    "product_name": "Unnamed product",
    "product_version": "Unnamed version",
}

RELATIONSHIP_CATEGORIES = (
    "default_component_of",
    "external_component_of",
    "installed_on",
    "installed_with",
    "optional_component_of",
)


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class ProductTreeBranch:
    category: str
    name: str = ""
    description: str = ""
    id: str = field(default_factory=random_id)
    sub_branches: list["ProductTreeBranch"] = field(default_factory=list)
    product_name: str | None = None
    identification_helper: dict | None = None
    family_id: str | None = None
    type: str | None = None

    def walk(self):
        yield self
        for b in self.sub_branches:
            yield from b.walk()


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class ProductFamily:
    name: str = ""
    # id of the parent family, None for a root
    parent: str | None = None
    id: str = field(default_factory=random_id)


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class Note:
    category: str = "description"
    title: str = ""
    content: str = ""
    id: str = field(default_factory=random_id)


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class Reference:
    category: str = "external"
    summary: str = ""
    url: str = ""
    id: str = field(default_factory=random_id)


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class AcknowledgmentName:
    name: str = ""
    id: str = field(default_factory=random_id)


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class Acknowledgment:
    organization: str | None = None
    summary: str | None = None
    names: list[AcknowledgmentName] = field(default_factory=list)
    url: str | None = None
    id: str = field(default_factory=random_id)


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class RevisionHistoryEntry:
    date: str = ""
    number: str = ""
    summary: str = ""
    id: str = field(default_factory=random_id)


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class Publisher:
    name: str = ""
    category: str = "vendor"
    namespace: str = ""
    contact_details: str = ""
    issuing_authority: str = ""


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class DocumentInformation:
    id: str = ""
    language: str = "en"
    status: str = "draft"
    title: str = ""
    publisher: Publisher = field(default_factory=Publisher)
    revision_history: list[RevisionHistoryEntry] = field(default_factory=list)
    notes: list[Note] = field(default_factory=list)
    references: list[Reference] = field(default_factory=list)
    acknowledgments: list[Acknowledgment] = field(default_factory=list)


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class VulnerabilityProduct:
    product_id: str
    status: str = "known_affected"
    id: str = field(default_factory=random_id)


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class Remediation:
    category: str = "mitigation"
    details: str | None = None
    date: str | None = None
    url: str | None = None
    product_ids: list[str] = field(default_factory=list)
    id: str = field(default_factory=random_id)


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class Score:
    cvss_version: str = "3.1"
    vector_string: str = ""
    product_ids: list[str] = field(default_factory=list)
    id: str = field(default_factory=random_id)


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class Flag:
    label: str = ""
    product_ids: list[str] = field(default_factory=list)
    id: str = field(default_factory=random_id)


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class Cwe:
    id: str
    name: str = ""


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class Vulnerability:
    cve: str = ""
    cwe: Cwe | None = None
    title: str = ""
    notes: list[Note] = field(default_factory=list)
    products: list[VulnerabilityProduct] = field(default_factory=list)
    remediations: list[Remediation] = field(default_factory=list)
    scores: list[Score] = field(default_factory=list)
    flags: list[Flag] = field(default_factory=list)
    id: str = field(default_factory=random_id)


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class Relationship:
    category: str = "installed_on"
    product_id1: str = field(default="", metadata=config(field_name="productId1"))
    product_id2: str = field(default="", metadata=config(field_name="productId2"))
    product1_version_ids: list[str] = field(
        default_factory=list, metadata=config(field_name="product1VersionIds")
    )
    product2_version_ids: list[str] = field(
        default_factory=list, metadata=config(field_name="product2VersionIds")
    )
    name: str = ""
    id: str = field(default_factory=random_id)

    def version_pairs(self) -> list[tuple[str, str]]:
        return [
            (source, target)
            for source in self.product1_version_ids
            for target in self.product2_version_ids
        ]


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class Snapshot:
    document_information: DocumentInformation = field(
        default_factory=DocumentInformation
    )
    products: list[ProductTreeBranch] = field(default_factory=list)
    families: list[ProductFamily] = field(default_factory=list)
    relationships: list[Relationship] = field(default_factory=list)
    vulnerabilities: list[Vulnerability] = field(default_factory=list)
    sos_document_type: str = "HardwareSoftware"
    imported_csaf_document: dict | None = field(
        default=None, metadata=config(field_name="importedCSAFDocument")
    )

    def find_branch(self, branch_id: str) -> ProductTreeBranch | None:
        for p in self.products:
            for b in p.walk():
                if b.id == branch_id:
                    return b
        return None

    def branches_by_category(self, category: str) -> list[ProductTreeBranch]:
        return [b for p in self.products for b in p.walk() if b.category == category]


def default_product_tree_branch(category: str) -> ProductTreeBranch:
    return ProductTreeBranch(
        category=category,
        type="Software" if category == "product_name" else None,
    )


def default_branch_name(category: str | None) -> str:
    return DEFAULT_BRANCH_NAMES.get(category, "Unnamed branch")


def combined_product_key(relationship_id: str, source: str, target: str) -> str:
    """Key of the combined product a relationship produces for one version pair."""
    return f"{relationship_id}/{source}/{target}"


def parent_branch(
    branch_id: str,
    branches: list[ProductTreeBranch],
    current: ProductTreeBranch | None = None,
) -> ProductTreeBranch | None:
    for b in branches:
        if b.id == branch_id:
            return current
        found = parent_branch(branch_id, b.sub_branches, b)
        if found:
            return found
    return None
