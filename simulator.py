# simulator.py
import os
import json
import logging
import collections
import numpy as np

from cache import CacheEngine, LOAD, STORE
from errors import CacheError, ConfigurationError, InvalidOperation, TraceFormatError
from geometry import CacheOptions

logger = logging.getLogger(__name__)

# Trace labels
DATA_STORE = 0
DATA_LOAD = 1
INSTRUCTION_FETCH = 2
TRACE_LABELS = (DATA_STORE, DATA_LOAD, INSTRUCTION_FETCH)

ACCESS_PATTERNS = ("sequential", "random", "mixed")
GENERATE_OPTIONS = ("num_requests", "working_set_kb", "block_size", "read_ratio",
                    "instruction_ratio", "access_pattern", "random_seed")

TraceEntry = collections.namedtuple("TraceEntry", ["label", "address"])


def parse_trace_line(line, line_number=None):
    """
    Parse one `<label> <hex-address> [...]` line.
    Returns None for blank lines and # comments.
    """
    line = line.strip()
    if not line or line.startswith("#"):
        return None
    fields = line.split()
    if len(fields) < 2:
        raise TraceFormatError(f"expected '<label> <address>', got {line!r}", line_number)
    try:
        label = int(fields[0])
    except ValueError:
        raise TraceFormatError(f"bad access label {fields[0]!r}", line_number) from None
    if label not in TRACE_LABELS:
        raise TraceFormatError(f"unknown access label {label}", line_number)
    return TraceEntry(label, fields[1])


def parse_trace(lines):
    for line_number, line in enumerate(lines, 1):
        entry = parse_trace_line(line, line_number)
        if entry is not None:
            yield entry


def read_trace(path):
    with open(path, "r") as f:
        yield from parse_trace(f)


def generate_trace(num_requests=10000, working_set_kb=64, block_size=32, read_ratio=0.8,
                   instruction_ratio=0.5, access_pattern="mixed", random_seed=None):
    """
    Build a synthetic trace over a working set of `working_set_kb` KiB.
    Instruction fetches walk their own sequential stream; data accesses
    follow `access_pattern`.
    """
    if access_pattern not in ACCESS_PATTERNS:
        raise ConfigurationError(f"unknown access pattern {access_pattern!r}")
    rng = np.random.default_rng(random_seed)
    num_blocks = max(1, (working_set_kb * 1024) // block_size)
    # instructions live above the data working set
    code_base = num_blocks * block_size

    entries = []
    data_ptr = 0
    code_ptr = 0
    for _ in range(num_requests):
        if rng.random() < instruction_ratio:
            address = code_base + code_ptr * block_size
            code_ptr = (code_ptr + 1) % num_blocks
            entries.append(TraceEntry(INSTRUCTION_FETCH, format(address, "x")))
            continue

        if access_pattern == "sequential" or (access_pattern == "mixed" and rng.random() < 0.8):
            block = data_ptr
            data_ptr = (data_ptr + 1) % num_blocks
        else:
            block = int(rng.integers(0, num_blocks))
        label = DATA_LOAD if rng.random() < read_ratio else DATA_STORE
        entries.append(TraceEntry(label, format(block * block_size, "x")))
    return entries


class CacheSimulator:
    """
    Drives an instruction cache and a data cache through a trace.
    In unified mode both engines model one shared cache: after every access
    the touched set is copied into the other engine, while hit/miss
    statistics stay separate per access kind.
    """

    def __init__(self, cfg, strict=False):
        cache_cfg = cfg.get("cache", {})
        self.cache_type = cache_cfg.get("type", "unified")
        if self.cache_type not in ("split", "unified"):
            raise ConfigurationError(f"unknown cache type {self.cache_type!r}")
        data_size = cache_cfg.get("data_size", 1024)
        instruction_size = data_size
        if self.split:
            instruction_size = cache_cfg.get("instruction_size", data_size)

        common = dict(
            associativity=cache_cfg.get("associativity", 1),
            block_size=cache_cfg.get("block_size", 32),
            hit_policy=cache_cfg.get("hit_policy", "write-back"),
            miss_policy=cache_cfg.get("miss_policy", "write-allocate"),
        )
        self.data = CacheEngine(CacheOptions(size=data_size, **common))
        self.instruction = CacheEngine(CacheOptions(size=instruction_size, **common))
        self.strict = strict
        self.errors = 0

    @property
    def split(self):
        return self.cache_type == "split"

    def access(self, entry):
        if entry.label == INSTRUCTION_FETCH:
            engine, other, op = self.instruction, self.data, LOAD
        elif entry.label == DATA_LOAD:
            engine, other, op = self.data, self.instruction, LOAD
        elif entry.label == DATA_STORE:
            engine, other, op = self.data, self.instruction, STORE
        else:
            raise InvalidOperation(f"unknown access label {entry.label!r}")

        engine.execute(op, entry.address)
        engine.stats.accesses += 1
        if not self.split:
            _, set_index, _ = engine.geometry.decode(entry.address)
            other.copy_set_from(engine, set_index)

    def run(self, entries):
        for entry in entries:
            try:
                self.access(entry)
            except CacheError as e:
                if self.strict:
                    raise
                self.errors += 1
                logger.warning("skipping access %s %s: %s", entry.label, entry.address, e)
        return self.summary()

    def summary(self):
        opts = self.data.options
        settings = {
            "type": self.cache_type,
            "data_size": self.data.options.size,
            "instruction_size": self.instruction.options.size,
            "associativity": opts.associativity,
            "block_size": opts.block_size,
            "hit_policy": opts.hit_policy,
            "miss_policy": opts.miss_policy,
            "instruction_geometry": self.instruction.geometry.as_dict(),
            "data_geometry": self.data.geometry.as_dict(),
        }
        return {
            "settings": settings,
            "instruction": self.instruction.stats.as_dict(),
            "data": self.data.stats.as_dict(),
            "errors": self.errors,
        }

    def save_results(self, summary, out_cfg):
        results_dir = out_cfg.get("results_dir", "results")
        os.makedirs(results_dir, exist_ok=True)
        path = os.path.join(results_dir, out_cfg.get("summary_file", "summary.json"))
        with open(path, "w") as f:
            json.dump(summary, f, indent=2)
        return path


def _cache_block(title, stats):
    hit_rate = stats["hit_rate"] if stats["accesses"] else 0.0
    return [
        title,
        f"accesses: {stats['accesses']}",
        f"misses: {stats['misses']}",
        f"miss rate: {stats['miss_rate']:.4f} (hit rate: {hit_rate:.4f})",
        f"replaces: {stats['replaces']}",
        f"memory reads: {stats['reads']}",
        f"memory writes: {stats['writes']}",
    ]


def format_report(summary):
    settings = summary["settings"]
    lines = ["***CACHE SETTINGS***"]
    if settings["type"] == "split":
        lines += [
            "Split I- D-cache",
            f"I-cache size: {settings['instruction_size']}",
            f"D-cache size: {settings['data_size']}",
        ]
    else:
        lines += ["Unified I- D-cache", f"Size: {settings['data_size']}"]
    lines += [
        f"Associativity: {settings['associativity']}",
        f"Block Size: {settings['block_size']}",
        f"Write Policy: {settings['hit_policy'].upper().replace('-', ' ')}",
        f"Allocation Policy: {settings['miss_policy'].upper().replace('-', ' ')}",
        "",
        "***CACHE STATISTICS***",
    ]
    lines += _cache_block("INSTRUCTIONS", summary["instruction"])
    lines += _cache_block("DATA", summary["data"])
    if summary.get("errors"):
        lines.append(f"skipped accesses: {summary['errors']}")
    return "\n".join(lines)
