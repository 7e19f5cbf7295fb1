"""
Upload pipeline orchestration
"""

from .service import TranscriptionPipeline, transcribe_file

__all__ = [
    "TranscriptionPipeline",
    "transcribe_file",
]
