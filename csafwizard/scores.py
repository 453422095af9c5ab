import logging

from cvss import CVSS2, CVSS3, CVSS4, CVSSError

log = logging.getLogger(__name__)

CVSS_KEYS = {
    "2.0": "cvss_v2",
    "3.0": "cvss_v3",
    "3.1": "cvss_v3",
    "4.0": "cvss_v4",
}

CVSS_HANDLES = {
    "cvss_v2": CVSS2,
    "cvss_v3": CVSS3,
    "cvss_v4": CVSS4,
}


def cvss_key(cvss_version: str) -> str:
    return CVSS_KEYS.get(cvss_version, "cvss_v4")


def base_score_and_severity(key: str, vector_string: str) -> tuple[float, str]:
    """
    Base score and upper-case severity for a vector. Invalid vectors score
    0 with an empty severity; the vector itself is reported by validation.
    """
    try:
        c = CVSS_HANDLES[key](vector_string)
    except CVSSError as e:
        log.debug(f"cannot score {vector_string!r}: {e}")
        return 0, ""

    score = float(c.base_score)
    if isinstance(c, CVSS4):
        return score, c.severity.upper()
    if isinstance(c, CVSS3):
        return score, c.severities()[0].upper()
    return score, ""


def cvss_object(cvss_version: str, vector_string: str) -> tuple[str, dict]:
    key = cvss_key(cvss_version)
    base_score, base_severity = base_score_and_severity(key, vector_string)
    obj = {
        "version": cvss_version,
        "vectorString": vector_string,
        "baseScore": base_score,
    }
    # CVSS v2 objects have no severity
    if key != "cvss_v2":
        obj["baseSeverity"] = base_severity
    return key, obj
