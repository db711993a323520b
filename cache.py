# cache.py
import collections
import logging

from errors import InvalidOperation
from geometry import CacheGeometry, CacheOptions
from stats import Statistics

logger = logging.getLogger(__name__)

# Operation codes
STORE = 0
LOAD = 1
OPERATIONS = {STORE: "store", LOAD: "load"}

Eviction = collections.namedtuple("Eviction", ["tag", "dirty"])


class CacheSet:
    """
    One set of a set-associative cache.
    Entries live in an OrderedDict mapping tag -> dirty flag.
    Leftmost = least recently used, rightmost = most recently used.
    The dirty flag moves with its tag, so the two can never get out of line.
    """

    def __init__(self, associativity, track_dirty=False):
        self.associativity = associativity
        self.track_dirty = track_dirty
        self.lines = collections.OrderedDict()

    def __len__(self):
        return len(self.lines)

    @property
    def full(self):
        return len(self.lines) >= self.associativity

    def tags(self):
        return list(self.lines)

    def dirty_flags(self):
        return list(self.lines.values())

    def find(self, tag):
        """Return the LRU-ordered position of `tag`, or None."""
        for position, resident in enumerate(self.lines):
            if resident == tag:
                return position
        return None

    def touch(self, tag, modify):
        # hit: promote to MRU; a store marks the line dirty, a load keeps it
        dirty = self.lines.pop(tag)
        self.lines[tag] = dirty or (modify and self.track_dirty)

    def insert(self, tag, modify):
        """Place a missing tag at MRU, evicting the LRU line if the set is full."""
        evicted = None
        if self.full:
            old_tag, old_dirty = self.lines.popitem(last=False)
            evicted = Eviction(old_tag, old_dirty)
        self.lines[tag] = modify and self.track_dirty
        return evicted

    def entries(self):
        return list(self.lines.items())

    def restore(self, entries):
        """Replace the contents with a copy of (tag, dirty) pairs, LRU first."""
        entries = list(entries)
        if len(entries) > self.associativity:
            raise ValueError(f"{len(entries)} entries do not fit in a {self.associativity}-way set")
        self.lines = collections.OrderedDict(
            (tag, bool(dirty) and self.track_dirty) for tag, dirty in entries)


class CacheEngine:
    """
    Trace-driven set-associative cache model with LRU replacement.
    Tracks hits and misses plus the block reads/writes the configured
    write policy would send to memory.
    """

    def __init__(self, options: CacheOptions):
        self.options = options
        self.geometry = CacheGeometry.from_options(options)
        self.sets = [CacheSet(options.associativity, track_dirty=options.write_back)
                     for _ in range(self.geometry.num_sets)]
        self.stats = Statistics()

    @classmethod
    def build(cls, size, associativity, block_size, hit_policy="write-back",
              miss_policy="write-allocate"):
        return cls(CacheOptions(size, associativity, block_size, hit_policy, miss_policy))

    def lookup(self, set_index, tag):
        position = self.sets[set_index].find(tag)
        if position is None:
            self.stats.misses += 1
        else:
            self.stats.hits += 1
        return position

    def replace(self, set_index, tag, hit, modify):
        """
        Run LRU replacement for one access. Returns the Eviction, or None
        when nothing left the set.
        """
        s = self.sets[set_index]
        if hit:
            s.touch(tag, modify)
            return None
        evicted = s.insert(tag, modify)
        if evicted is not None:
            logger.debug("set %d: evicted tag %#x (dirty=%s) for tag %#x",
                         set_index, evicted.tag, evicted.dirty, tag)
        return evicted

    def execute(self, operation, address):
        """
        Access `address` (base-16 text) with `operation` (LOAD or STORE).
        Raises InvalidOperation or DecodeError before touching any state.
        The caller counts accesses.
        """
        if (isinstance(operation, bool) or not isinstance(operation, int)
                or operation not in OPERATIONS):
            raise InvalidOperation(f"bad cache operation code: {operation!r}")
        tag, set_index, _ = self.geometry.decode(address)
        modify = operation == STORE

        position = self.lookup(set_index, tag)
        hit = position is not None
        if not hit:
            if not modify and self.sets[set_index].full:
                self.stats.replaces += 1
            # block fetched from memory
            self.stats.reads += 1

        evicted = self.replace(set_index, tag, hit, modify)

        if self.options.write_back:
            if evicted is not None and evicted.dirty:
                self.stats.writes += 1
        elif modify:
            self.stats.writes += 1

    def load(self, address):
        self.execute(LOAD, address)

    def store(self, address):
        self.execute(STORE, address)

    def resident_tags(self, set_index):
        return self.sets[set_index].tags()

    def copy_set_from(self, other, set_index):
        """Overwrite one set with a copy of the same set in `other`."""
        self.sets[set_index].restore(other.sets[set_index].entries())
