"""
pose_challenge - Pose Similarity Challenge
A PySide6-based tool that scores how closely a challenge pose matches a target pose.
"""

__version__ = "0.1.0"

# Lazy imports to avoid circular dependencies
def __getattr__(name):
    if name == "Keypoint":
        from .models import Keypoint
        return Keypoint
    elif name == "Pose":
        from .models import Pose
        return Pose
    elif name == "normalize_detections":
        from .normalizer import normalize_detections
        return normalize_detections
    elif name == "score_poses":
        from .scoring import score_poses
        return score_poses
    elif name == "score_message":
        from .scoring import score_message
        return score_message
    elif name == "render_pose":
        from .renderer import render_pose
        return render_pose
    elif name == "ChallengeSession":
        from .session import ChallengeSession
        return ChallengeSession
    elif name == "PoseChallengeWindow":
        from .app import PoseChallengeWindow
        return PoseChallengeWindow
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "Keypoint",
    "Pose",
    "normalize_detections",
    "score_poses",
    "score_message",
    "render_pose",
    "ChallengeSession",
    "PoseChallengeWindow",
    "__version__",
]


def main():
    """Entry point for the application."""
    from .cli import main as cli_main
    cli_main()
