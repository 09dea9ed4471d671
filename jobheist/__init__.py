from jobheist.ai.config import AnalysisConfig
from jobheist.core.errors import (
    AnalysisCancelled,
    AnalysisError,
    CollectionError,
    IngestError,
    JobheistError,
    PreconditionError,
)
from jobheist.schemas import Job, ProgressUpdate, Resume, Score
from jobheist.services.ats_service import ats, ats_stream
from jobheist.services.render import render

__all__ = [
    "ats",
    "ats_stream",
    "render",
    "AnalysisConfig",
    "Resume",
    "Job",
    "Score",
    "ProgressUpdate",
    "JobheistError",
    "PreconditionError",
    "IngestError",
    "CollectionError",
    "AnalysisError",
    "AnalysisCancelled",
]
