"""
Delivery layer: result submission and terminal rendering.
"""

from rescue_drill.delivery.result_sink import (
    HttpResultSink,
    LoggingResultSink,
    RecordingResultSink,
    ResultSink,
    Submission,
)

__all__ = [
    "HttpResultSink",
    "LoggingResultSink",
    "RecordingResultSink",
    "ResultSink",
    "Submission",
]
