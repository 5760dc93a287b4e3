"""Command-line entry point for the pose challenge application."""

import argparse
import functools
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compare a challenge pose against a target pose")
    parser.add_argument(
        "--score-sound",
        type=Path,
        default=None,
        help="Audio file played whenever the similarity score changes",
    )
    parser.add_argument(
        "--bgm",
        type=Path,
        default=None,
        help="Background music file, looped at 30%% volume",
    )
    parser.add_argument(
        "--model-complexity",
        type=int,
        choices=(0, 1, 2),
        default=1,
        help="MediaPipe pose model complexity (default: 1)",
    )
    parser.add_argument(
        "--min-detection-confidence",
        type=float,
        default=0.5,
        help="Minimum person detection confidence (default: 0.5)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Logging level (default: WARNING)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from PySide6.QtWidgets import QApplication

    from .app import PoseChallengeWindow
    from .estimators import MediaPipePoseEstimator

    for label, path in (("score sound", args.score_sound), ("background music", args.bgm)):
        if path is not None and not path.is_file():
            raise SystemExit(f"Cannot find {label}: {path}")

    app = QApplication(sys.argv[:1])
    app.setStyle("Fusion")

    factory = functools.partial(
        MediaPipePoseEstimator,
        model_complexity=args.model_complexity,
        min_detection_confidence=args.min_detection_confidence,
    )
    window = PoseChallengeWindow(
        score_sound=str(args.score_sound) if args.score_sound else None,
        estimator_factory=factory,
        bgm=str(args.bgm) if args.bgm else None,
    )
    window.show()
    window.load_estimator()
    try:
        exit_code = app.exec()
    finally:
        window.shutdown()
    sys.exit(exit_code)


__all__ = ["parse_args", "main"]
