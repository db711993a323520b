# main.py
import argparse
import json
import logging
import sys

from errors import CacheError, ConfigurationError
from simulator import GENERATE_OPTIONS, CacheSimulator, format_report, generate_trace, read_trace
from visualize import plot_hit_miss_rate, plot_memory_traffic

logger = logging.getLogger(__name__)


def load_config(path="config.json"):
    with open(path, "r") as f:
        return json.load(f)


def load_entries(cfg, trace_path=None):
    trace_cfg = cfg.get("trace", {})
    trace_path = trace_path or trace_cfg.get("path")
    if trace_path:
        logger.info("Reading trace from %s", trace_path)
        return read_trace(trace_path)
    gen_cfg = dict(trace_cfg.get("generate", {}))
    unknown = sorted(set(gen_cfg) - set(GENERATE_OPTIONS))
    if unknown:
        raise ConfigurationError(f"unknown trace.generate options: {', '.join(unknown)}")
    gen_cfg.setdefault("block_size", cfg.get("cache", {}).get("block_size", 32))
    logger.info("Generating synthetic trace: %s", gen_cfg)
    return generate_trace(**gen_cfg)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Set-associative cache trace simulator")
    parser.add_argument("--config", default="config.json", help="JSON config file")
    parser.add_argument("--trace", help="trace file, overrides trace.path in the config")
    parser.add_argument("--no-plots", action="store_true", help="skip writing charts")
    parser.add_argument("--strict", action="store_true", help="stop at the first bad access")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s")
    try:
        cfg = load_config(args.config)
        sim = CacheSimulator(cfg, strict=args.strict)
        summary = sim.run(load_entries(cfg, args.trace))
    except (OSError, ValueError, CacheError) as e:
        logger.error("%s", e)
        return 1

    print(format_report(summary))
    out_cfg = cfg.get("output", {})
    results_path = sim.save_results(summary, out_cfg)
    logger.info("Results saved to: %s", results_path)

    if not args.no_plots:
        plot_hit_miss_rate(summary, out_cfg.get("hitmiss_plot", "results/hit_miss_rate.png"))
        plot_memory_traffic(summary, out_cfg.get("traffic_plot", "results/memory_traffic.png"))
        logger.info("Plots saved in %s", out_cfg.get("results_dir", "results"))
    return 0


if __name__ == "__main__":
    sys.exit(main())
