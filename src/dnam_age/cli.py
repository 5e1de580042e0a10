"""
dnam_age.cli

Command Line Interface.
Exposes all file paths and run settings as arguments.
"""

import argparse
import os
import sys

from dnam_age.config import AnalysisConfig
from dnam_age.exceptions import DNAmAgeError
from dnam_age.pipeline import filter_methylation, run_analysis
from dnam_age.utils.logging import log, set_log_level


def _add_input_args(p):
    p.add_argument("--coefficients", type=str, required=True, help="Semicolon-separated coefficient table")
    p.add_argument("--descriptors", type=str, required=True, help="Sample descriptor table (GEO phenotype columns)")
    p.add_argument("--methylation", type=str, required=True, help="Probe x sample matrix (.csv or .csv.gz)")
    p.add_argument("--model", dest="models", action="append", help="Model column to apply (repeatable; default: all)")

    p.add_argument("--chunk-size", type=int, default=AnalysisConfig.chunk_size, help="Rows read per chunk")
    p.add_argument("--intercept-label", type=str, default=AnalysisConfig.intercept_label)
    p.add_argument("--group-marker", type=str, default=AnalysisConfig.group_marker,
                   help="Substring identifying retained samples in the group field")
    p.add_argument("--group-column", type=str, default=AnalysisConfig.group_column)
    p.add_argument("--age-column", type=str, default=AnalysisConfig.age_column)
    p.add_argument("--title-column", type=str, default=AnalysisConfig.title_column)


def build_config(args) -> AnalysisConfig:
    return AnalysisConfig(
        chunk_size=args.chunk_size,
        intercept_label=args.intercept_label,
        group_marker=args.group_marker,
        group_column=args.group_column,
        age_column=args.age_column,
        title_column=args.title_column,
        adult_age=getattr(args, "adult_age", AnalysisConfig.adult_age),
        axis_range=tuple(getattr(args, "axis_range", AnalysisConfig.axis_range)),
        panel_columns=getattr(args, "panel_columns", AnalysisConfig.panel_columns),
        strict_probes=getattr(args, "strict_probes", False),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="DNA methylation age clock")
    parser.add_argument("--log-level", type=str, default="INFO", help="DEBUG, INFO, WARNING or ERROR")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- Predict ---
    p_pred = subparsers.add_parser("predict", help="Predict ages and plot them against chronological age")
    _add_input_args(p_pred)
    p_pred.add_argument("--output", type=str, required=True, help="Output figure (.png, .pdf, ...)")
    p_pred.add_argument("--predictions-out", type=str, help="Optional CSV of samples with predicted ages")
    p_pred.add_argument("--metrics-out", type=str, help="Optional CSV of per-model statistics")
    p_pred.add_argument("--adult-age", type=float, default=AnalysisConfig.adult_age)
    p_pred.add_argument("--axis-range", type=float, nargs=2, default=AnalysisConfig.axis_range,
                        metavar=("MIN", "MAX"))
    p_pred.add_argument("--panel-columns", type=int, default=AnalysisConfig.panel_columns)
    p_pred.add_argument("--strict-probes", action="store_true",
                        help="Fail when model probes are missing from the matrix")

    # --- Filter ---
    p_filt = subparsers.add_parser("filter", help="Write the model-probe / retained-sample subset of the matrix")
    _add_input_args(p_filt)
    p_filt.add_argument("--output", type=str, required=True, help="Output CSV")

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    set_log_level(args.log_level)

    if args.command is None:
        parser.print_help()
        return 1

    try:
        config = build_config(args)
        if args.command == "predict":
            run_analysis(
                coefficients_path=args.coefficients,
                descriptors_path=args.descriptors,
                methylation_path=args.methylation,
                figure_path=args.output,
                models=args.models,
                config=config,
                predictions_path=args.predictions_out,
                metrics_path=args.metrics_out,
            )
        elif args.command == "filter":
            _, _, _, betas = filter_methylation(
                args.coefficients, args.descriptors, args.methylation, models=args.models, config=config
            )
            out_dir = os.path.dirname(args.output)
            if out_dir:
                os.makedirs(out_dir, exist_ok=True)
            betas.to_csv(args.output)
            log(f"Filtered matrix saved to {args.output}")
    except (DNAmAgeError, ValueError, FileNotFoundError) as e:
        log(f"Error: {e}", level="ERROR")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
