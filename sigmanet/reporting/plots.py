"""Headless loss-curve plotting."""

from __future__ import annotations

from pathlib import Path
from typing import List, Mapping, Tuple


class PlotAdapter:
    """Record the per-cycle loss and render it to ``loss.png`` on close."""

    def __init__(self, run_dir: str | Path, enable_plots: bool = False, every: int = 1):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self.every = max(1, int(every))
        self._history: List[Tuple[int, float]] = []

    def on_step(self, step: int, metrics: Mapping[str, float]) -> None:
        if not self.enable_plots or step % self.every:
            return
        self._history.append((step, float(metrics.get("loss", 0.0))))

    def close(self) -> Path | None:
        if not self.enable_plots or not self._history:
            return None
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt  # imported lazily for headless safety

        self.run_dir.mkdir(parents=True, exist_ok=True)
        steps, losses = zip(*self._history)
        fig, ax = plt.subplots()
        ax.plot(steps, losses)
        ax.set_xlabel("Cycle")
        ax.set_ylabel("Squared error")
        ax.set_title("Online training loss")
        plot_path = self.run_dir / "loss.png"
        fig.savefig(plot_path)
        plt.close(fig)
        return plot_path

    __call__ = on_step
