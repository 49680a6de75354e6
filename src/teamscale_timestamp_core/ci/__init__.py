from .detectors import DETECTORS, KNOWN_VARIABLES, detect_branch

__all__ = ["DETECTORS", "KNOWN_VARIABLES", "detect_branch"]
