# conftest.py: shared fixtures for the csafwizard tests
# Editing-model snapshots and CSAF documents used across the test modules.

import pytest

from csafwizard.model import (
    DocumentInformation,
    ProductFamily,
    ProductTreeBranch,
    Publisher,
    RevisionHistoryEntry,
    Snapshot,
    Vulnerability,
    VulnerabilityProduct,
)


def version(name: str, full_name: str, **kwargs) -> ProductTreeBranch:
    return ProductTreeBranch(
        category="product_version",
        name=name,
        product_name=full_name,
        description=full_name,
        **kwargs,
    )


@pytest.fixture
def families():
    """Enterprise -> Pro family chain."""
    enterprise = ProductFamily(name="Enterprise")
    pro = ProductFamily(name="Pro", parent=enterprise.id)
    return [enterprise, pro]


@pytest.fixture
def acme(families):
    """Snapshot with one vendor, two products and one family-linked product."""
    pro = families[1]
    widget = ProductTreeBranch(
        category="product_name",
        name="Widget",
        type="Software",
        family_id=pro.id,
        sub_branches=[
            version(
                "1.0",
                "Acme Widget 1.0",
                identification_helper={"cpe": "cpe:2.3:a:acme:widget:1.0:*:*:*:*:*:*:*"},
            ),
            version("2.0", "Acme Widget 2.0"),
        ],
    )
    gadget = ProductTreeBranch(
        category="product_name",
        name="Gadget",
        type="Software",
        sub_branches=[version("3.1", "Acme Gadget 3.1")],
    )
    vendor = ProductTreeBranch(category="vendor", name="Acme", sub_branches=[widget, gadget])
    return Snapshot(
        document_information=DocumentInformation(
            id="ACME-2024-001",
            language="en",
            status="final",
            title="Widget advisory",
            publisher=Publisher(
                name="Acme PSIRT",
                category="vendor",
                namespace="https://acme.example.com",
                contact_details="psirt@acme.example.com",
            ),
            revision_history=[
                RevisionHistoryEntry(date="2024-01-01T00:00:00Z", number="1", summary="Initial"),
            ],
        ),
        products=[vendor],
        families=families,
    )


@pytest.fixture
def acme_versions(acme):
    return {b.name: b for b in acme.branches_by_category("product_version")}


@pytest.fixture
def affected_snapshot(acme, acme_versions):
    """acme with one vulnerability affecting Widget 1.0, fixed in 2.0."""
    acme.vulnerabilities = [
        Vulnerability(
            cve="CVE-2024-0001",
            title="Widget overflow",
            products=[
                VulnerabilityProduct(product_id=acme_versions["1.0"].id, status="known_affected"),
                VulnerabilityProduct(product_id=acme_versions["2.0"].id, status="fixed"),
            ],
        )
    ]
    return acme


@pytest.fixture
def scenario_document():
    return {
        "document": {"tracking": {"id": "T1"}},
        "product_tree": {
            "branches": [
                {
                    "category": "vendor",
                    "name": "Acme",
                    "branches": [
                        {
                            "category": "product_family",
                            "name": "Pro",
                            "branches": [
                                {
                                    "category": "product_name",
                                    "name": "Widget",
                                    "branches": [
                                        {
                                            "category": "product_version",
                                            "name": "1.0",
                                            "product": {"product_id": "CSAFPID-1"},
                                        }
                                    ],
                                }
                            ],
                        }
                    ],
                }
            ]
        },
    }


@pytest.fixture
def advisory():
    """A complete CSAF 2.0 advisory with families, relationships and scores."""
    return {
        "document": {
            "category": "csaf_security_advisory",
            "csaf_version": "2.0",
            "lang": "en",
            "title": "Example advisory",
            "distribution": {"tlp": {"label": "WHITE"}},
            "publisher": {
                "category": "vendor",
                "name": "Example PSIRT",
                "namespace": "https://example.com",
                "contact_details": "psirt@example.com",
            },
            "tracking": {
                "id": "EX-2024-7",
                "status": "final",
                "version": "2",
                "initial_release_date": "2024-03-01T00:00:00Z",
                "current_release_date": "2024-03-05T00:00:00Z",
                "revision_history": [
                    {"date": "2024-03-01T00:00:00Z", "number": "1", "summary": "Initial"},
                    {"date": "2024-03-05T00:00:00Z", "number": "2", "summary": "Fix info"},
                ],
            },
            "notes": [{"category": "summary", "title": "Summary", "text": "Bad bug."}],
            "references": [
                {"category": "self", "summary": "This advisory", "url": "https://example.com/ex-2024-7.json"}
            ],
            "acknowledgments": [
                {"organization": "Finders", "names": ["Alice", "Bob"], "urls": ["https://finders.example"]}
            ],
        },
        "product_tree": {
            "branches": [
                {
                    "category": "vendor",
                    "name": "Example",
                    "branches": [
                        {
                            "category": "product_family",
                            "name": "Servers",
                            "branches": [
                                {
                                    "category": "product_family",
                                    "name": "Edge",
                                    "branches": [
                                        {
                                            "category": "product_name",
                                            "name": "Router",
                                            "branches": [
                                                {
                                                    "category": "product_version",
                                                    "name": "4.2",
                                                    "product": {
                                                        "name": "Example Router 4.2",
                                                        "product_id": "ROUTER-4.2",
                                                        "product_identification_helper": {
                                                            "purl": "pkg:generic/example/router@4.2"
                                                        },
                                                    },
                                                }
                                            ],
                                        }
                                    ],
                                }
                            ],
                        },
                        {
                            "category": "product_name",
                            "name": "Firmware",
                            "branches": [
                                {
                                    "category": "product_version",
                                    "name": "7",
                                    "product": {"name": "Example Firmware 7", "product_id": "FW-7"},
                                },
                                {
                                    "category": "product_version",
                                    "name": "8",
                                    "product": {"name": "Example Firmware 8", "product_id": "FW-8"},
                                },
                            ],
                        },
                    ],
                }
            ],
            "relationships": [
                {
                    "category": "installed_on",
                    "product_reference": "FW-7",
                    "relates_to_product_reference": "ROUTER-4.2",
                    "full_product_name": {"name": "Firmware 7 on Router 4.2", "product_id": "COMBO-7"},
                },
                {
                    "category": "installed_on",
                    "product_reference": "FW-8",
                    "relates_to_product_reference": "ROUTER-4.2",
                    "full_product_name": {"name": "Firmware 8 on Router 4.2", "product_id": "COMBO-8"},
                },
            ],
        },
        "vulnerabilities": [
            {
                "cve": "CVE-2024-1234",
                "title": "Firmware overflow",
                "cwe": {"id": "CWE-787", "name": "Out-of-bounds Write"},
                "notes": [{"category": "description", "title": "Details", "text": "Overflow."}],
                "threats": [{"category": "impact", "details": "RCE"}],
                "product_status": {
                    "known_affected": ["FW-7", "COMBO-7"],
                    "fixed": ["FW-8"],
                },
                "remediations": [
                    {"category": "vendor_fix", "details": "Upgrade to 8", "product_ids": ["FW-7"]}
                ],
                "scores": [
                    {
                        "cvss_v3": {
                            "version": "3.1",
                            "vectorString": "CVSS:3.1/AV:N/AC:L/PR:N/UI:N/S:U/C:H/I:H/A:H",
                            "baseScore": 9.8,
                            "baseSeverity": "CRITICAL",
                        },
                        "products": ["FW-7"],
                    }
                ],
                "flags": [{"label": "vulnerable_code_not_present", "product_ids": ["FW-8"]}],
            }
        ],
    }
