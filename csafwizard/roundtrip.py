"""
Feeds CSAF documents through import -> export -> import and reports every
document whose product tree or product ids do not survive the trip.

usage: csaf-roundtrip [-v] PATH...

PATH is a CSAF .json file or a .tar.zst archive of them. Export settings
are read from the file named by $CSAF_WIZARD_CONFIG, if set.
"""
import json
import logging
import sys
import tarfile

import zstandard as zstd

from csafwizard import csaf_types as csaf
from csafwizard.document import create_csaf_document, parse_csaf_document
from csafwizard.families import family_chain
from csafwizard.model import ProductTreeBranch, Snapshot
from csafwizard.scheme import is_csaf_document
from csafwizard.settings import ExportSettings, load_settings

log = logging.getLogger("csafwizard.roundtrip")

FIXED_NOW = "1970-01-01T00:00:00+00:00"


def branch_signature(branch: ProductTreeBranch, snapshot: Snapshot) -> dict:
    """
    Everything about a branch except generated ids and productName, which
    shares the one wire field with the description.
    """
    return {
        "category": branch.category,
        "name": branch.name,
        "description": branch.description,
        "identificationHelper": branch.identification_helper,
        "family": [f.name for f in family_chain(branch.family_id, snapshot.families)],
        "subBranches": [branch_signature(b, snapshot) for b in branch.sub_branches],
    }


def product_signature(snapshot: Snapshot) -> list[dict]:
    return [branch_signature(b, snapshot) for b in snapshot.products]


def check_document(name: str, doc: dict, settings: ExportSettings | None = None) -> bool:
    if not is_csaf_document(doc):
        log.warning(f"SKIPPED: {name} is not a CSAF document")
        return True

    first = parse_csaf_document(doc)
    exported = create_csaf_document(
        first.snapshot,
        id_cache=first.export_id_cache(settings),
        settings=settings,
        now=FIXED_NOW,
    )
    second = parse_csaf_document(exported)

    ok = True
    if product_signature(first.snapshot) != product_signature(second.snapshot):
        log.warning(f"MISMATCH: {name} product tree changed on round trip")
        ok = False

    before = set(csaf.from_document(doc).product_tree.product_ids())
    after = set(csaf.from_document(exported).product_tree.product_ids())
    if before != after:
        log.warning(
            f"MISMATCH: {name} product ids changed: lost {sorted(before - after)}, gained {sorted(after - before)}"
        )
        ok = False

    if ok:
        log.debug(f"OK: {name}")
    return ok


def process_json_file(path: str, settings: ExportSettings | None = None) -> bool:
    with open(path) as fh:
        return check_document(path, json.load(fh), settings)


def process_zst_file(zst_file_path: str, settings: ExportSettings | None = None) -> bool:
    ok = True
    with open(zst_file_path, "rb") as zst_file:
        dctx = zstd.ZstdDecompressor()
        with dctx.stream_reader(zst_file) as reader:
            with tarfile.open(fileobj=reader, mode="r|") as tar:
                for member in tar:
                    if not (member.isfile() and member.name.endswith(".json")):
                        continue
                    json_file = tar.extractfile(member)
                    if not json_file:
                        continue
                    try:
                        doc = json.loads(json_file.read().decode("utf-8"))
                    except ValueError as e:
                        log.error(f"COULD NOT READ: {member.name} ({e.__class__.__name__})")
                        ok = False
                        continue
                    ok = check_document(member.name, doc, settings) and ok
    return ok


def main(args: list[str]) -> int:
    verbose = "-v" in args
    paths = [a for a in args if a != "-v"]
    logging.basicConfig(
        stream=sys.stdout,
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s:%(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    if not paths:
        print(__doc__.strip(), file=sys.stderr)
        return 2

    settings = load_settings()
    ok = True
    for path in paths:
        if path.endswith(".tar.zst"):
            ok = process_zst_file(path, settings) and ok
        else:
            ok = process_json_file(path, settings) and ok
    return 0 if ok else 1


def run():
    sys.exit(main(sys.argv[1:]))


if __name__ == "__main__":
    run()
