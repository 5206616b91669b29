# panel_mediation/bridge.py
"""Command-line bridge for driving the estimator from another statistics package.

A Stata (or any other) session exports its data set, calls::

    panel-mediation data.dta invest efficiency,innovation value firm year within results

and reads back ``results_indirect.csv``, ``results_direct.csv`` and
``results_total.csv``.  ``panel-mediation-compare`` runs the same model
under several panel estimators and writes one long table.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from .estimators.mediation import MediationResult, estimate_mediation
from .helpers.config import EFFECTS, PANEL_MODELS, ModelConfig
from .helpers.errors import ConfigurationError, DataFormatError, EstimationError
from .helpers.io import load_table
from .reporting.summary import format_result
from .study import DEFAULT_COMPARISON, compare_models, comparison_table

EXIT_ESTIMATION = 1
EXIT_INPUT = 2


def parse_mediators(spec: str) -> List[str]:
    """``"m1, m2"`` -> ``["m1", "m2"]``."""
    meds = [m.strip() for m in str(spec).split(",") if m.strip()]
    if not meds:
        raise ConfigurationError("no mediator names given", field="M")
    return meds


def _base_path(output: str) -> Path:
    p = Path(output)
    return p.with_suffix("") if p.suffix else p


def _with_suffix(base: Path, tail: str) -> Path:
    return base.with_name(base.name + tail)


# ----------------------------
# Bridge runs
# ----------------------------
def run_mediation_bridge(
    data_file: str,
    X: str,
    M: str,
    Y: str,
    id_col: str,
    time_col: str,
    panel_model: str = "within",
    output: str = "stata_results.csv",
    robust_se: bool = True,
    effect: str = "individual",
    lag: int = 0,
) -> Tuple[MediationResult, Dict[str, Path]]:
    """Estimate once and write the indirect/direct/total tables.

    Returns the result and the written paths keyed ``indirect``,
    ``direct`` and ``total``.  Nothing is written if reading or
    estimation fails.
    """
    config = ModelConfig(panel_model=panel_model, effect=effect, robust_se=robust_se, lag=lag).validate()
    data = load_table(data_file)
    meds = parse_mediators(M)
    result = estimate_mediation(X, meds, Y, id_col, time_col, data, config)

    base = _base_path(output)
    # labelled keys (indirect_m1, direct_x, total_x) as read back by the calling session
    tables = {
        "indirect": pd.DataFrame(
            {
                "mediator": list(result.indirect_effects),
                "indirect_effect": list(result.indirect_effects.values()),
            }
        ),
        "direct": pd.DataFrame(
            {"variable": list(result.direct_effects), "direct_effect": list(result.direct_effects.values())}
        ),
        "total": pd.DataFrame(
            {"variable": list(result.total_effects), "total_effect": list(result.total_effects.values())}
        ),
    }
    paths: Dict[str, Path] = {}
    for kind, table in tables.items():
        path = _with_suffix(base, f"_{kind}.csv")
        table.to_csv(path, index=False)
        paths[kind] = path

    print(format_result(result))
    print("")
    print("Results saved to:")
    for path in paths.values():
        print(f"- {path}")
    return result, paths


def run_comparison_bridge(
    data_file: str,
    X: str,
    M: str,
    Y: str,
    id_col: str,
    time_col: str,
    models: Sequence[str] = DEFAULT_COMPARISON,
    output: str = "comparison_results.csv",
    effect: str = "individual",
) -> Tuple[pd.DataFrame, Path]:
    """Compare panel estimators and write ``model, mediator, indirect_effect``."""
    config = ModelConfig(effect=effect).validate()
    data = load_table(data_file)
    meds = parse_mediators(M)
    results = compare_models(X, meds, Y, id_col, time_col, data, list(models), config)
    if not results:
        raise EstimationError("every panel model failed", model="compare")

    table = comparison_table(results)
    table["mediator"] = "indirect_" + table["mediator"]
    path = _with_suffix(_base_path(output), ".csv")
    table.to_csv(path, index=False)

    print("Model Comparison Results:")
    print(table.to_string(index=False, float_format=lambda v: f"{v:.4f}"))
    print(f"\nResults saved to: {path}")
    return table, path


# ----------------------------
# CLI
# ----------------------------
def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("data_file", help="input table (.csv, .tsv, .txt or Stata .dta)")
    parser.add_argument("X", help="independent variable")
    parser.add_argument("M", help="mediator(s), comma separated")
    parser.add_argument("Y", help="dependent variable")
    parser.add_argument("id_col", help="individual identifier column")
    parser.add_argument("time_col", help="time identifier column")
    parser.add_argument("--effect", default="individual", choices=EFFECTS)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="panel-mediation", description="Panel data mediation analysis.")
    _add_common(p)
    p.add_argument("panel_model", nargs="?", default="within", choices=PANEL_MODELS)
    p.add_argument("output", nargs="?", default="stata_results.csv", help="output base name")
    p.add_argument("--no-robust", dest="robust_se", action="store_false", help="conventional standard errors")
    p.add_argument("--lag", type=int, default=0)
    return p


def build_compare_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="panel-mediation-compare", description="Compare panel estimators.")
    _add_common(p)
    p.add_argument("output", nargs="?", default="comparison_results.csv", help="output file")
    p.add_argument("--models", default=",".join(DEFAULT_COMPARISON), help="comma separated panel models")
    return p


def _run_guarded(fn, *args, **kwargs) -> int:
    try:
        fn(*args, **kwargs)
    except (DataFormatError, ConfigurationError, FileNotFoundError) as exc:
        print(f"Error: {exc}")
        return EXIT_INPUT
    except EstimationError as exc:
        print(f"Estimation failed: {exc}")
        return EXIT_ESTIMATION
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return _run_guarded(
        run_mediation_bridge,
        args.data_file, args.X, args.M, args.Y, args.id_col, args.time_col,
        panel_model=args.panel_model, output=args.output, robust_se=args.robust_se,
        effect=args.effect, lag=args.lag,
    )


def compare_main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_compare_parser().parse_args(argv)
    models = [m.strip() for m in args.models.split(",") if m.strip()]
    return _run_guarded(
        run_comparison_bridge,
        args.data_file, args.X, args.M, args.Y, args.id_col, args.time_col,
        models=models, output=args.output, effect=args.effect,
    )


if __name__ == "__main__":
    raise SystemExit(main())
