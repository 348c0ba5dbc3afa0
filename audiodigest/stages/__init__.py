"""Pipeline stages."""

from audiodigest.stages.base import Stage
from audiodigest.stages.convert import FormatConverter
from audiodigest.stages.save import SummaryWriter
from audiodigest.stages.summarize import SUMMARY_SYSTEM_PROMPT, Summarizer
from audiodigest.stages.transcribe import Transcriber

__all__ = [
    "FormatConverter",
    "SUMMARY_SYSTEM_PROMPT",
    "Stage",
    "Summarizer",
    "SummaryWriter",
    "Transcriber",
]
