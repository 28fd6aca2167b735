from __future__ import annotations

import logging
import sys
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from .config import load_config
from .tasks import run_eda, run_full_pipeline

logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(message)s")
app = typer.Typer(add_completion=False)
console = Console()


def _strip_ipykernel_args(argv: list[str]) -> list[str]:
    """Jupyter/ipykernel injects `-f <connection_file>` into sys.argv."""
    out = [argv[0]]
    i = 1
    while i < len(argv):
        a = argv[i]
        if a in ("-f", "--f"):
            i += 2
            continue
        if a.startswith("--f="):
            i += 1
            continue
        out.append(a)
        i += 1
    return out


def _print_results(title: str, results: dict) -> None:
    table = Table(title=title)
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")

    charts = results.pop("charts", {})
    for k, v in results.items():
        table.add_row(str(k), str(v))
    for name, path in charts.items():
        table.add_row(f"chart:{name}", path)

    console.print(table)


@app.command()
def run(
    data_path: Optional[str] = None,
    output_dir: Optional[str] = None,
    split_year: Optional[int] = None,
    automl_seconds: Optional[int] = None,
    horizon_days: Optional[int] = None,
    show: bool = True,
):
    """Full pipeline: diagnostics, AutoML, AutoARIMA, forecasts."""
    cfg = load_config(
        data_path=data_path,
        output_dir=output_dir,
        split_year=split_year,
        automl_max_runtime_secs=automl_seconds,
        horizon_days=horizon_days,
        show_plots=show,
    )

    results = run_full_pipeline(cfg)
    _print_results("Temperature Pipeline Results", results)


@app.command()
def eda(
    data_path: Optional[str] = None,
    output_dir: Optional[str] = None,
    show: bool = True,
):
    """Load, clean and plot diagnostics only."""
    cfg = load_config(data_path=data_path, output_dir=output_dir, show_plots=show)

    results = run_eda(cfg)
    _print_results("Temperature EDA Results", results)


if __name__ == "__main__":
    sys.argv = _strip_ipykernel_args(sys.argv)
    app(standalone_mode=False)
