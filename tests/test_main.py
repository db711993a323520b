import json

from main import load_config, load_entries, main


def write_config(tmp_path, trace_path=None, cache_type="split"):
    cfg = {
        "cache": {"type": cache_type, "block_size": 32, "associativity": 2,
                  "hit_policy": "wb", "miss_policy": "wa",
                  "data_size": 1024, "instruction_size": 1024},
        "trace": {"path": trace_path,
                  "generate": {"num_requests": 200, "working_set_kb": 2, "random_seed": 5}},
        "output": {"results_dir": str(tmp_path / "results"),
                   "hitmiss_plot": str(tmp_path / "results" / "hm.png"),
                   "traffic_plot": str(tmp_path / "results" / "traffic.png")},
    }
    path = tmp_path / "config.json"
    path.write_text(json.dumps(cfg))
    return path


def test_load_entries_generates_when_no_trace(tmp_path):
    cfg = load_config(str(write_config(tmp_path)))
    entries = load_entries(cfg)
    assert len(entries) == 200


def test_main_with_trace_file(tmp_path, capsys):
    trace = tmp_path / "t.trace"
    trace.write_text("2 0\n1 1000\n0 1000\n1 1000\n")
    config = write_config(tmp_path, trace_path=str(trace))
    assert main(["--config", str(config)]) == 0

    out = capsys.readouterr().out
    assert "***CACHE SETTINGS***" in out
    assert "Write Policy: WRITE BACK" in out
    summary = json.loads((tmp_path / "results" / "summary.json").read_text())
    assert summary["data"]["accesses"] == 3
    assert summary["data"]["hits"] == 2
    assert summary["instruction"]["misses"] == 1
    assert (tmp_path / "results" / "hm.png").exists()
    assert (tmp_path / "results" / "traffic.png").exists()


def test_main_synthetic_no_plots(tmp_path):
    config = write_config(tmp_path, cache_type="unified")
    assert main(["--config", str(config), "--no-plots"]) == 0
    summary = json.loads((tmp_path / "results" / "summary.json").read_text())
    total = summary["instruction"]["accesses"] + summary["data"]["accesses"]
    assert total == 200
    assert not (tmp_path / "results" / "hm.png").exists()


def test_main_missing_config(tmp_path):
    assert main(["--config", str(tmp_path / "nope.json")]) == 1


def test_main_bad_trace_line(tmp_path):
    trace = tmp_path / "bad.trace"
    trace.write_text("1 0\n7 10\n")
    config = write_config(tmp_path, trace_path=str(trace))
    assert main(["--config", str(config), "--no-plots"]) == 1


def test_main_counts_bad_addresses(tmp_path):
    trace = tmp_path / "t.trace"
    trace.write_text("1 0\n1 zz\n0 40\n")
    config = write_config(tmp_path, trace_path=str(trace))
    assert main(["--config", str(config), "--no-plots"]) == 0
    summary = json.loads((tmp_path / "results" / "summary.json").read_text())
    assert summary["errors"] == 1
    assert summary["data"]["accesses"] == 2


def test_main_strict_stops_on_bad_address(tmp_path):
    trace = tmp_path / "t.trace"
    trace.write_text("1 0\n1 zz\n0 40\n")
    config = write_config(tmp_path, trace_path=str(trace))
    assert main(["--config", str(config), "--no-plots", "--strict"]) == 1
    assert not (tmp_path / "results" / "summary.json").exists()


def test_main_malformed_config(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    assert main(["--config", str(path), "--no-plots"]) == 1


def test_main_unknown_generate_option(tmp_path):
    config = write_config(tmp_path)
    cfg = json.loads(config.read_text())
    cfg["trace"]["generate"]["burst_length"] = 4
    config.write_text(json.dumps(cfg))
    assert main(["--config", str(config), "--no-plots"]) == 1
