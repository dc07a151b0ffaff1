"""
Media Sorter - duplicate image detection and safe file reorganization.

Finds images with identical perceptual fingerprints, renumbers folders by
modification time and moves files into categories with undo.
"""

__version__ = "0.1.0"
__author__ = "Media Sorter Contributors"

from media_sorter.core.classifier import Classifier
from media_sorter.core.detector import DuplicateDetector
from media_sorter.core.scanner import MediaScanner
from media_sorter.core.undo import UndoLedger

__all__ = ["Classifier", "DuplicateDetector", "MediaScanner", "UndoLedger", "__version__"]
