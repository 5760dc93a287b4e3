"""
Errors raised while turning an uploaded file into a pose.

Each error carries a short user-facing message; the session shows it
on the slot that failed and leaves the other slot untouched.
"""


class PoseChallengeError(Exception):
    """Base class for per-slot pipeline failures."""

    user_message = "Something went wrong"

    def __init__(self, message: str = None):
        super().__init__(message or self.user_message)


class InvalidFileType(PoseChallengeError):
    user_message = "Please choose an image file"


class FileReadFailure(PoseChallengeError):
    user_message = "Failed to read the file"


class ImageDecodeFailure(PoseChallengeError):
    user_message = "Failed to load the image"


class NoPersonDetected(PoseChallengeError):
    user_message = "No person was detected"


class InvalidPoseData(PoseChallengeError, ValueError):
    user_message = "The detector returned malformed keypoints"
