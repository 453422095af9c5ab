"""
Lightweight shape checks at the import boundary. These are not schema
validation: they only tell "not a CSAF file at all" apart from everything
else, and list where a document strays from what the wizard can edit.
"""

# the parts of a document the wizard expects to find
WIZARD_SCHEME = {
    "document": {
        "lang": "string",
        "tracking": {
            "status": "string",
            "revision_history": [
                {
                    "date": "string",
                },
            ],
        },
    },
}

JSON_TYPES = {
    "string": str,
    "number": (int, float),
    "boolean": bool,
}


def get_csaf_version(document_object) -> str | None:
    if not isinstance(document_object, dict):
        return None
    document = document_object.get("document")
    if not isinstance(document, dict):
        return None
    version = document.get("csaf_version")
    if isinstance(version, str):
        return version
    return None


def is_csaf_document(document_object) -> bool:
    return get_csaf_version(document_object) is not None


def is_csaf_version_supported(document_object, supported: list[str]) -> bool:
    return get_csaf_version(document_object) in supported


def find_mismatches(data, scheme, path: str = "") -> list[str]:
    """
    Missing fields and type mismatches of `data` against `scheme`. Fields the
    scheme does not mention are fine. List schemes check every element
    against their first entry.
    """
    mismatches = []
    if isinstance(scheme, dict):
        if not isinstance(data, dict):
            return [f"Type mismatch at {path or '.'}: expected object"]
        for key, sub_scheme in scheme.items():
            current_path = f"{path}.{key}" if path else key
            if key not in data:
                mismatches.append(f"Missing field: {current_path}")
                continue
            mismatches.extend(find_mismatches(data[key], sub_scheme, current_path))
    elif isinstance(scheme, list):
        if not isinstance(data, list):
            return [f"Type mismatch at {path}: expected array"]
        for i, item in enumerate(data):
            mismatches.extend(find_mismatches(item, scheme[0], f"{path}[{i}]"))
    else:
        expected = JSON_TYPES[scheme]
        if not isinstance(data, expected) or (scheme == "number" and isinstance(data, bool)):
            mismatches.append(
                f"Type mismatch at {path}: expected {scheme}, got {type(data).__name__}"
            )
    return mismatches
