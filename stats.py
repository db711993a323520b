# stats.py

COUNTERS = ("accesses", "hits", "misses", "reads", "writes", "replaces")


class Statistics:
    """
    Counters for one cache.
    `reads`/`writes` count blocks moved to or from backing memory;
    `replaces` counts only evictions caused by load misses.
    """

    def __init__(self):
        self.accesses = 0
        self.hits = 0
        self.misses = 0
        self.reads = 0
        self.writes = 0
        self.replaces = 0

    def miss_rate(self):
        lookups = self.hits + self.misses
        if lookups == 0:
            return 0.0
        return round(self.misses / lookups, 4)

    def hit_rate(self):
        return round(1 - self.miss_rate(), 4)

    def as_dict(self):
        d = {name: getattr(self, name) for name in COUNTERS}
        d["miss_rate"] = self.miss_rate()
        d["hit_rate"] = self.hit_rate()
        return d

    def __repr__(self):
        fields = ", ".join(f"{name}={getattr(self, name)}" for name in COUNTERS)
        return f"Statistics({fields})"
