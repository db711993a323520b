# geometry.py
import collections
import math
import re

from errors import ConfigurationError, DecodeError

WRITE_BACK = "write-back"
WRITE_THROUGH = "write-through"
WRITE_ALLOCATE = "write-allocate"
NO_WRITE_ALLOCATE = "no-write-allocate"

HIT_POLICIES = {
    "wb": WRITE_BACK,
    "write-back": WRITE_BACK,
    "wt": WRITE_THROUGH,
    "write-through": WRITE_THROUGH,
}
MISS_POLICIES = {
    "wa": WRITE_ALLOCATE,
    "write-allocate": WRITE_ALLOCATE,
    "nw": NO_WRITE_ALLOCATE,
    "nwa": NO_WRITE_ALLOCATE,
    "no-write-allocate": NO_WRITE_ALLOCATE,
}

WORD_BITS = 64
_HEX_RE = re.compile(r"(?:0[xX])?[0-9a-fA-F]+")


def _is_power_of_two(n):
    return n > 0 and (n & (n - 1)) == 0


def _positive_int(name, value):
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")
    return value


def _normalize(value, table, name):
    key = str(value).strip().lower()
    if key not in table:
        raise ConfigurationError(f"unknown {name} {value!r}, expected one of {sorted(table)}")
    return table[key]


class CacheOptions(collections.namedtuple(
        "CacheOptions", ["size", "associativity", "block_size", "hit_policy", "miss_policy"])):
    """
    Construction options for one cache.
    Policies accept the short trace-tool spellings (wb/wt, wa/nw) and are
    normalized to their long names.
    """

    __slots__ = ()

    def __new__(cls, size, associativity, block_size,
                hit_policy=WRITE_BACK, miss_policy=WRITE_ALLOCATE):
        return super().__new__(
            cls,
            _positive_int("size", size),
            _positive_int("associativity", associativity),
            _positive_int("block_size", block_size),
            _normalize(hit_policy, HIT_POLICIES, "hit_policy"),
            _normalize(miss_policy, MISS_POLICIES, "miss_policy"),
        )

    @property
    def write_back(self):
        return self.hit_policy == WRITE_BACK


class CacheGeometry:
    """
    Bit layout of an address for a given cache shape.

        | tag | set index | block offset |
    """

    def __init__(self, size, block_size, associativity):
        if not _is_power_of_two(block_size):
            raise ConfigurationError(f"block size {block_size} is not a power of two")
        line_bytes = block_size * associativity
        if size % line_bytes:
            raise ConfigurationError(
                f"size {size} is not a multiple of block_size * associativity ({line_bytes})")
        num_sets = size // line_bytes
        if not _is_power_of_two(num_sets):
            raise ConfigurationError(f"derived set count {num_sets} is not a power of two")

        self.size = size
        self.block_size = block_size
        self.associativity = associativity
        self.num_sets = num_sets
        self.total_bits = int(math.log2(size))
        self.set_index_bits = int(math.log2(num_sets))
        self.block_offset_bits = int(math.log2(block_size))
        self.tag_bits = self.total_bits - self.set_index_bits - self.block_offset_bits

        self._offset_mask = (1 << self.block_offset_bits) - 1
        self._set_mask = (1 << self.set_index_bits) - 1

    @classmethod
    def from_options(cls, options):
        return cls(options.size, options.block_size, options.associativity)

    def split(self, address):
        """Split an integer address into (tag, set_index, block_offset)."""
        block_offset = address & self._offset_mask
        set_index = (address >> self.block_offset_bits) & self._set_mask
        tag = address >> (self.block_offset_bits + self.set_index_bits)
        return tag, set_index, block_offset

    def join(self, tag, set_index, block_offset=0):
        return ((tag << (self.set_index_bits + self.block_offset_bits))
                | (set_index << self.block_offset_bits)
                | block_offset)

    def decode(self, address_text):
        return self.split(parse_address(address_text))

    def as_dict(self):
        return {
            "num_sets": self.num_sets,
            "total_bits": self.total_bits,
            "set_index_bits": self.set_index_bits,
            "block_offset_bits": self.block_offset_bits,
            "tag_bits": self.tag_bits,
        }


def parse_address(address_text):
    """Parse base-16 address text (optional 0x prefix) into an unsigned 64-bit int."""
    if not isinstance(address_text, str) or not _HEX_RE.fullmatch(address_text):
        raise DecodeError(f"malformed address {address_text!r}")
    address = int(address_text, 16)
    if address >> WORD_BITS:
        raise DecodeError(f"address {address_text!r} does not fit in {WORD_BITS} bits")
    return address


def decode(address_text, geometry):
    return geometry.decode(address_text)
