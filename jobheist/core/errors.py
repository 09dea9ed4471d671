from __future__ import annotations


class JobheistError(RuntimeError):
    def __init__(self, message: str, *, code: str = "jobheist_error"):
        super().__init__(message)
        self.code = code


class PreconditionError(JobheistError):
    """Raised before any I/O when a credential or option is unusable."""

    def __init__(self, message: str, *, code: str = "missing_credential"):
        super().__init__(message, code=code)


class IngestError(JobheistError):
    def __init__(self, message: str, *, code: str = "ingest_failed"):
        super().__init__(message, code=code)


class CollectionError(JobheistError):
    def __init__(self, message: str, *, code: str = "collection_failed"):
        super().__init__(message, code=code)


class AnalysisError(JobheistError):
    def __init__(self, message: str, *, code: str = "analysis_failed"):
        super().__init__(message, code=code)


class AnalysisCancelled(JobheistError):
    def __init__(self, message: str = "Analysis was cancelled.", *, code: str = "cancelled"):
        super().__init__(message, code=code)
