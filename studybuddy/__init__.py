"""StudyBuddy: a study-companion API backed by Google Gemini."""

__version__ = "1.0.0"
