"""Log line sinks — persistence targets for build narration."""

from xcforge.sinks.file_log import FileLogSink

__all__ = ["FileLogSink"]
