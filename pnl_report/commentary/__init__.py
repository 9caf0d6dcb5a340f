"""
Commentary generation behind the report's AI commentary endpoint.
"""

from .service import CommentaryService, build_report_digest, summarize_report_text

__all__ = [
    "CommentaryService",
    "build_report_digest",
    "summarize_report_text",
]
