from simulator import CacheSimulator, TraceEntry, DATA_LOAD, DATA_STORE
from visualize import plot_hit_miss_rate, plot_memory_traffic


def _summary(entries):
    cfg = {"cache": {"type": "split", "block_size": 32, "associativity": 2, "data_size": 1024}}
    return CacheSimulator(cfg).run(entries)


def test_plots_written(tmp_path):
    summary = _summary([TraceEntry(DATA_LOAD, "0"), TraceEntry(DATA_STORE, "0"),
                        TraceEntry(DATA_LOAD, "200"), TraceEntry(DATA_LOAD, "400")])
    hitmiss = tmp_path / "plots" / "hit_miss.png"
    traffic = tmp_path / "plots" / "traffic.png"
    plot_hit_miss_rate(summary, str(hitmiss))
    plot_memory_traffic(summary, str(traffic))
    assert hitmiss.stat().st_size > 0
    assert traffic.stat().st_size > 0


def test_plots_with_idle_caches(tmp_path):
    summary = _summary([])
    out = tmp_path / "idle.png"
    plot_hit_miss_rate(summary, str(out))
    assert out.exists()
