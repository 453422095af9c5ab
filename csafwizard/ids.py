import uuid


def random_id() -> str:
    return uuid.uuid4().hex


class IdCache:
    """
    Memoizing map from an external (or synthetic) key to a generated id.

    One instance lives for exactly one import or export pass. Without a
    prefix, ids are random hex strings; with one, ids come from a counter
    ("CSAFPID-0001", "CSAFPID-0002", ...). Empty keys always mint a fresh
    id and are never remembered.
    """

    def __init__(self, prefix: str | None = None, width: int = 4):
        self.prefix = prefix
        self.width = width
        self.previous_generated_ids: dict[str, str] = {}
        self._counters: dict[str, int] = {}
        self._issued: set[str] = set()

    def resolve(self, key: str | None = None, prefix: str | None = None) -> str:
        if key and key in self.previous_generated_ids:
            return self.previous_generated_ids[key]
        new_id = self._mint(prefix or self.prefix)
        if key:
            self.previous_generated_ids[key] = new_id
        return new_id

    def get(self, key: str | None) -> str | None:
        if not key:
            return None
        return self.previous_generated_ids.get(key)

    def bind(self, key: str, value: str):
        self.previous_generated_ids[key] = value
        self._issued.add(value)

    def inverted(self, prefix: str | None) -> "IdCache":
        """
        A new cache mapping every id handed out by this one back to its key.
        Used to export a model with the PIDs it was imported with; `prefix`
        is the PID prefix for products added since.
        """
        result = IdCache(prefix=prefix, width=self.width)
        for key, value in self.previous_generated_ids.items():
            result.bind(value, key)
        return result

    def _mint(self, prefix: str | None) -> str:
        if not prefix:
            new_id = random_id()
            self._issued.add(new_id)
            return new_id
        while True:
            counter = self._counters.get(prefix, 0) + 1
            self._counters[prefix] = counter
            new_id = f"{prefix}-{str(counter).zfill(self.width)}"
            if new_id not in self._issued:
                self._issued.add(new_id)
                return new_id

    def __contains__(self, key: str) -> bool:
        return key in self.previous_generated_ids

    def __len__(self) -> int:
        return len(self.previous_generated_ids)
