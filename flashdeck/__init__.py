"""
flashdeck - flashcard sets with adaptive study sessions.

Per-card mastery is recomputed from completed study history and drives
weighted study queues and a simple retention prediction.
"""

__version__ = "0.3.0"
