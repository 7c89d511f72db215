"""Визуализация результатов запуска"""

from pathlib import Path
from typing import List

import matplotlib.pyplot as plt
import numpy as np

from .base import PhaseResult


PHASE_COLORS = {
    'Write': '#e74c3c',
    'Random Write': '#e67e22',
    'Read': '#3498db',
    'Random Read': '#2ecc71',
}


def generate_all_plots(results: List[PhaseResult], output_dir: Path) -> List[Path]:
    output_dir.mkdir(parents=True, exist_ok=True)

    paths = [
        plot_throughput(results, output_dir / "01_throughput.png"),
        plot_latency(results, output_dir / "02_latency.png"),
        plot_cpu(results, output_dir / "03_cpu.png"),
    ]
    return paths


def _label_bars(ax, bars, fmt: str):
    for bar in bars:
        height = bar.get_height()
        if height > 0:
            ax.text(bar.get_x() + bar.get_width() / 2., height,
                    format(height, fmt),
                    ha='center', va='bottom', fontsize=9)


def plot_throughput(results: List[PhaseResult], output_path: Path) -> Path:
    """Throughput по фазам"""
    fig, ax = plt.subplots(figsize=(10, 6))

    names = [r.name for r in results]
    values = [r.throughput_mbps for r in results]
    bars = ax.bar(names, values, color=[PHASE_COLORS.get(n, '#95a5a6') for n in names])
    _label_bars(ax, bars, '.1f')

    ax.set_xlabel('Phase', fontsize=12, fontweight='bold')
    ax.set_ylabel('Throughput (MB/s)', fontsize=12, fontweight='bold')
    ax.set_title('Throughput by Phase', fontsize=14, fontweight='bold', pad=20)
    ax.grid(axis='y', alpha=0.3, linestyle='--')

    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches='tight')
    plt.close(fig)
    return output_path


def plot_latency(results: List[PhaseResult], output_path: Path) -> Path:
    """Average / p95 / p99 / max latency по фазам"""
    fig, ax = plt.subplots(figsize=(12, 7))

    x = np.arange(len(results))
    width = 0.2
    series = [
        ('Average', [r.latency_avg_ms for r in results], 0.9),
        ('P95', [r.latency_p95_ms for r in results], 0.7),
        ('P99', [r.latency_p99_ms for r in results], 0.5),
        ('Max', [r.latency_max_ms for r in results], 0.3),
    ]
    colors = [PHASE_COLORS.get(r.name, '#95a5a6') for r in results]

    for i, (label, values, alpha) in enumerate(series):
        offset = width * (i - len(series) / 2 + 0.5)
        bars = ax.bar(x + offset, values, width, label=label, color=colors, alpha=alpha)
        _label_bars(ax, bars, '.2f')

    ax.set_xlabel('Phase', fontsize=12, fontweight='bold')
    ax.set_ylabel('Latency (ms)', fontsize=12, fontweight='bold')
    ax.set_title('Per-operation Latency', fontsize=14, fontweight='bold', pad=20)
    ax.set_xticks(x)
    ax.set_xticklabels([r.name for r in results], fontsize=10)
    ax.legend(fontsize=11)
    ax.grid(axis='y', alpha=0.3, linestyle='--')

    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches='tight')
    plt.close(fig)
    return output_path


def plot_cpu(results: List[PhaseResult], output_path: Path) -> Path:
    """Доля user и system CPU от реального времени"""
    fig, ax = plt.subplots(figsize=(10, 6))

    names = [r.name for r in results]
    user = np.array([r.user_cpu_pct for r in results])
    system = np.array([r.sys_cpu_pct for r in results])

    ax.bar(names, user, label='User', color='#3498db')
    ax.bar(names, system, bottom=user, label='System', color='#e74c3c')

    ax.set_xlabel('Phase', fontsize=12, fontweight='bold')
    ax.set_ylabel('CPU (% of wall clock)', fontsize=12, fontweight='bold')
    ax.set_title('CPU Utilization by Phase', fontsize=14, fontweight='bold', pad=20)
    ax.legend(fontsize=11, loc='upper right')
    ax.grid(axis='y', alpha=0.3, linestyle='--')

    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches='tight')
    plt.close(fig)
    return output_path
