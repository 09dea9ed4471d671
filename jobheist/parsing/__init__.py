from .models import ParsedDoc
from .parse import parse_document

__all__ = ["ParsedDoc", "parse_document"]
