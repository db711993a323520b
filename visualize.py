# visualize.py
import os
import numpy as np
import matplotlib.pyplot as plt

CACHES = (("instruction", "Instruction cache"), ("data", "Data cache"))


def _ensure_dir(outpath):
    parent = os.path.dirname(outpath)
    if parent:
        os.makedirs(parent, exist_ok=True)


def plot_hit_miss_rate(summary, outpath):
    _ensure_dir(outpath)
    fig, axes = plt.subplots(1, len(CACHES), figsize=(8, 4))
    for ax, (key, title) in zip(axes, CACHES):
        stats = summary[key]
        if stats["hits"] + stats["misses"] == 0:
            ax.text(0.5, 0.5, "no accesses", ha="center", va="center")
            ax.axis("off")
        else:
            ax.pie([stats["hit_rate"], stats["miss_rate"]], labels=["Hit", "Miss"], autopct='%1.1f%%')
        ax.set_title(f"{title} ({stats['accesses']} accesses)")
    fig.suptitle("Cache Hit/Miss Rate")
    fig.tight_layout()
    fig.savefig(outpath)
    plt.close(fig)


def plot_memory_traffic(summary, outpath):
    _ensure_dir(outpath)
    counters = ["reads", "writes", "replaces"]
    x = np.arange(len(counters))
    width = 0.35
    fig, ax = plt.subplots(figsize=(8, 4))
    for i, (key, title) in enumerate(CACHES):
        values = [summary[key][c] for c in counters]
        ax.bar(x + (i - 0.5) * width, values, width, label=title)
    ax.set_xticks(x)
    ax.set_xticklabels(["Memory reads", "Memory writes", "Replaces"])
    ax.set_ylabel("Blocks")
    ax.set_title(f"Memory Traffic ({summary['settings']['hit_policy']})")
    ax.legend()
    ax.grid(True, axis="y")
    fig.tight_layout()
    fig.savefig(outpath)
    plt.close(fig)
