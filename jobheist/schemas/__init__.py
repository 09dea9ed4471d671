from .job import Job, JobExtraction
from .progress import (
    PHASES,
    ParsedData,
    Phase,
    ProgressCallback,
    ProgressUpdate,
    ScrapedData,
    TextData,
)
from .resume import Resume
from .score import (
    Compatibility,
    KeywordAnalysis,
    MissingKeyword,
    RoleAnalysis,
    Score,
    StrongMatch,
    Suggestion,
    UnderRepresentedKeyword,
)

__all__ = [
    "Resume",
    "Job",
    "JobExtraction",
    "Score",
    "KeywordAnalysis",
    "StrongMatch",
    "UnderRepresentedKeyword",
    "MissingKeyword",
    "Suggestion",
    "RoleAnalysis",
    "Compatibility",
    "Phase",
    "PHASES",
    "ParsedData",
    "ScrapedData",
    "TextData",
    "ProgressUpdate",
    "ProgressCallback",
]
