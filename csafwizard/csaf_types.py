from dataclasses import dataclass, field
from dataclasses_json import dataclass_json


PRODUCT_STATUS_BUCKETS = (
    "known_affected",
    "fixed",
    "first_fixed",
    "first_affected",
    "known_not_affected",
    "last_affected",
    "recommended",
    "under_investigation",
)


@dataclass_json
@dataclass
class Reference:
    category: str | None = None
    summary: str | None = None
    url: str | None = None


@dataclass_json
@dataclass
class Note:
    category: str | None = None
    text: str | None = None
    title: str | None = None


@dataclass_json
@dataclass
class Acknowledgment:
    organization: str | None = None
    summary: str | None = None
    names: list[str] = field(default_factory=list)
    urls: list[str] = field(default_factory=list)


@dataclass_json
@dataclass
class ProductStatus:
    known_affected: list[str] = field(default_factory=list)
    fixed: list[str] = field(default_factory=list)
    first_fixed: list[str] = field(default_factory=list)
    first_affected: list[str] = field(default_factory=list)
    known_not_affected: list[str] = field(default_factory=list)
    last_affected: list[str] = field(default_factory=list)
    recommended: list[str] = field(default_factory=list)
    under_investigation: list[str] = field(default_factory=list)

    def buckets(self) -> list[tuple[str, list[str]]]:
        """Non-empty buckets in CSAF order."""
        result = []
        for name in PRODUCT_STATUS_BUCKETS:
            pids = getattr(self, name)
            if pids:
                result.append((name, pids))
        return result


@dataclass_json
@dataclass
class CWE:
    id: str | None = None
    name: str | None = None


@dataclass_json
@dataclass
class Flag:
    label: str | None = None
    product_ids: list[str] = field(default_factory=list)


@dataclass_json
@dataclass
class Remediation:
    category: str | None = None
    date: str | None = None
    details: str | None = None
    url: str | None = None
    product_ids: list[str] = field(default_factory=list)


# cvss_v* objects use camelCase keys on the wire and are carried as mappings
@dataclass_json
@dataclass
class Score:
    cvss_v2: dict | None = None
    cvss_v3: dict | None = None
    cvss_v4: dict | None = None
    products: list[str] = field(default_factory=list)

    def cvss(self) -> tuple[str, dict | None]:
        for key in ("cvss_v4", "cvss_v3", "cvss_v2"):
            value = getattr(self, key)
            if value is not None:
                return key, value
        return "cvss_v3", None


@dataclass_json
@dataclass
class Vulnerability:
    cve: str | None = None
    title: str | None = None
    cwe: CWE | None = None
    notes: list[Note] = field(default_factory=list)
    product_status: ProductStatus | None = None
    remediations: list[Remediation] = field(default_factory=list)
    scores: list[Score] = field(default_factory=list)
    flags: list[Flag] = field(default_factory=list)


@dataclass_json
@dataclass
class FullProductName:
    name: str | None = None
    product_id: str | None = None


@dataclass_json
@dataclass
class Relationship:
    category: str | None = None
    full_product_name: FullProductName | None = None
    product_reference: str | None = None
    relates_to_product_reference: str | None = None


@dataclass_json
@dataclass
class Product:
    name: str | None = None
    product_id: str | None = None
    product_identification_helper: dict | None = None


@dataclass_json
@dataclass
class Branch:
    category: str | None = None
    name: str | None = None
    branches: list["Branch"] = field(default_factory=list)
    product: Product | None = None

    def children(self) -> list["Branch"]:
        return self.branches or []

    def accumulate_categories_recursively(self, accumulator: set[str]):
        accumulator.add(self.category)
        for b in self.children():
            b.accumulate_categories_recursively(accumulator)

    def product_version_branches(self) -> list["Branch"]:
        result = list()
        if self.category == "product_version":
            result.append(self)
        for b in self.children():
            result.extend(b.product_version_branches())

        return result


@dataclass_json
@dataclass
class ProductTree:
    branches: list[Branch] = field(default_factory=list)
    relationships: list[Relationship] = field(default_factory=list)

    def distinct_branch_categories(self) -> set[str]:
        result = set()
        for b in self.branches or []:
            b.accumulate_categories_recursively(result)

        return result

    def product_ids(self) -> list[str]:
        result = []
        for b in self.branches or []:
            for v in b.product_version_branches():
                if v.product and v.product.product_id:
                    result.append(v.product.product_id)
        return result


@dataclass_json
@dataclass
class Publisher:
    category: str | None = None
    contact_details: str | None = None
    issuing_authority: str | None = None
    name: str | None = None
    namespace: str | None = None


@dataclass_json
@dataclass
class GeneratorEngine:
    name: str | None = None
    version: str | None = None


@dataclass_json
@dataclass
class Generator:
    date: str | None = None
    engine: GeneratorEngine | None = None


@dataclass_json
@dataclass
class RevisionEntry:
    date: str | None = None
    number: str | None = None  # yes, really
    summary: str | None = None


@dataclass_json
@dataclass
class Tracking:
    current_release_date: str | None = None
    generator: Generator | None = None
    id: str | None = None
    initial_release_date: str | None = None
    revision_history: list[RevisionEntry] = field(default_factory=list)
    status: str | None = None
    version: str | None = None


@dataclass_json
@dataclass
class Document:
    category: str | None = None
    csaf_version: str | None = None
    lang: str | None = None
    title: str | None = None
    publisher: Publisher | None = None
    tracking: Tracking | None = None
    notes: list[Note] = field(default_factory=list)
    references: list[Reference] = field(default_factory=list)
    acknowledgments: list[Acknowledgment] = field(default_factory=list)


@dataclass_json
@dataclass
class CSAF_JSON:
    document: Document = field(default_factory=Document)
    product_tree: ProductTree = field(default_factory=ProductTree)
    vulnerabilities: list[Vulnerability] = field(default_factory=list)

    def to_json_dict(self) -> dict:
        return prune(self.to_dict())


def prune(value):
    """
    Drops None values, empty lists and empty mappings, recursively.
    CSAF arrays and objects must not be empty.
    """
    if isinstance(value, dict):
        result = {}
        for k, v in value.items():
            v = prune(v)
            if v is None or v == [] or v == {}:
                continue
            result[k] = v
        return result
    if isinstance(value, list):
        return [prune(v) for v in value]
    return value


def from_document(data: dict) -> CSAF_JSON:
    c = CSAF_JSON.from_dict(data, infer_missing=True)
    if c.document is None:
        c.document = Document()
    if c.product_tree is None:
        c.product_tree = ProductTree()
    if c.vulnerabilities is None:
        c.vulnerabilities = []
    return c
