"""Command-line entry point: train, predict, or progressively evaluate.

Usage:
    adpredictor --mode train --data train.txt --model-out model.tsv --beta 0.1
    adpredictor --mode predict --data test.txt --model-in model.tsv
    adpredictor --mode evaluate --data stream.txt
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Optional, Sequence

from .calibration import CalibrationTracker
from .config import DEFAULT_BETA, LOG_LEVEL, setup_logging
from .dataset import iter_examples
from .model import EPLogisticRegression

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="EP online Bayesian logistic regression")
    parser.add_argument("--mode", choices=["train", "predict", "evaluate"], default="train")
    parser.add_argument("--data", required=True, help="Sparse example file (label id:value ...)")
    parser.add_argument("--model-in", default=None, help="Model file to start from")
    parser.add_argument("--model-out", default=None, help="Where to save the trained model")
    parser.add_argument("--output", default=None, help="Prediction output file (default stdout)")
    parser.add_argument("--beta", default=DEFAULT_BETA, help="Observation-noise variance")
    parser.add_argument("--log-level", default=LOG_LEVEL)
    return parser


def _load_model(args: argparse.Namespace) -> EPLogisticRegression:
    model = EPLogisticRegression.from_params({"beta": args.beta})
    if args.model_in:
        model.load_model(args.model_in)
    return model


def run_train(args: argparse.Namespace) -> None:
    if not args.model_out:
        raise ValueError("--model-out required for train mode")
    model = _load_model(args)
    model.train(iter_examples(args.data))
    model.save_model(args.model_out)


def run_predict(args: argparse.Namespace) -> None:
    if not args.model_in:
        raise ValueError("--model-in required for predict mode")
    model = _load_model(args)

    out = open(args.output, "w", encoding="utf-8") if args.output else sys.stdout
    try:
        count = 0
        for example in iter_examples(args.data):
            out.write(f"{model.predict(example)!r}\n")
            count += 1
    finally:
        if out is not sys.stdout:
            out.close()
    logger.info("Wrote %d predictions", count)


def run_evaluate(args: argparse.Namespace) -> dict:
    """Progressive validation: score each example before training on it."""
    model = _load_model(args)
    tracker = CalibrationTracker()
    for example in iter_examples(args.data):
        tracker.record(model.predict(example), example.label)
        model.train_example(example)

    summary = tracker.summary()
    print(json.dumps(summary, indent=2))
    if args.model_out:
        model.save_model(args.model_out)
    return summary


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    # Logs go to stderr so predictions on stdout stay clean.
    setup_logging(args.log_level, stream=sys.stderr)

    try:
        if args.mode == "train":
            run_train(args)
        elif args.mode == "predict":
            run_predict(args)
        else:
            run_evaluate(args)
    except (ValueError, OSError):
        logger.error("adpredictor_failed", exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
