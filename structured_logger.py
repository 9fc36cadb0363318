"""
Structured Logger - JSON log lines with request tracking
"""
import logging
import json
import sys
from contextvars import ContextVar
from typing import Dict, Optional, Any
from datetime import datetime
import uuid

LOGGER_NAME = "mf_faq_assistant"

# Request ID of the question being answered (per asyncio task)
_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


class StructuredLogger:
    """Structured logging with request ID tracking"""

    def __init__(self, log_level: str = "INFO", log_file: Optional[str] = None):
        """
        Initialize structured logger

        Args:
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_file: Optional log file path (console only if None)
        """
        self.logger = logging.getLogger(LOGGER_NAME)
        self.logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

        # Remove existing handlers
        self.logger.handlers = []

        formatter = logging.Formatter(
            '%(asctime)s | %(levelname)s | %(name)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # Logs go to stderr so the CLI's stdout stays clean
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        self.logger.addHandler(console_handler)

        if log_file:
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

    def set_request_id(self, request_id: Optional[str]):
        """Set request ID for current context"""
        _request_id.set(request_id)

    def get_request_id(self) -> Optional[str]:
        """Get current request ID"""
        return _request_id.get()

    def _format_message(self, level: str, message: str, **kwargs) -> str:
        """Format log message as JSON"""
        log_data = {
            'timestamp': datetime.now().isoformat(),
            'level': level,
            'message': message,
            **kwargs
        }

        request_id = self.get_request_id()
        if request_id:
            log_data['request_id'] = request_id

        return json.dumps(log_data, default=str)

    def debug(self, message: str, **kwargs):
        self.logger.debug(self._format_message("DEBUG", message, **kwargs))

    def info(self, message: str, **kwargs):
        self.logger.info(self._format_message("INFO", message, **kwargs))

    def warning(self, message: str, **kwargs):
        self.logger.warning(self._format_message("WARNING", message, **kwargs))

    def error(self, message: str, **kwargs):
        self.logger.error(self._format_message("ERROR", message, **kwargs))

    def log_question(self, question: str, mode: str, outcome: str, response_time: float, **kwargs):
        """Log one answered question"""
        self.info("question_answered",
            question=question[:100],  # Truncate long questions
            mode=mode,
            outcome=outcome,
            response_time_seconds=round(response_time, 3),
            **kwargs
        )

    def log_error(self, error: Exception, context: Dict[str, Any]):
        """Log error with context"""
        self.error("error_occurred",
            error_type=type(error).__name__,
            error_message=str(error),
            **context
        )


# Global logger instance
_logger_instance: Optional[StructuredLogger] = None

def configure_logger(log_level: str = "INFO", log_file: Optional[str] = None) -> StructuredLogger:
    """(Re)create the global logger with the given settings"""
    global _logger_instance
    _logger_instance = StructuredLogger(log_level=log_level, log_file=log_file)
    return _logger_instance

def get_logger() -> StructuredLogger:
    """Get global logger instance"""
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = StructuredLogger()
    return _logger_instance

def generate_request_id() -> str:
    """Generate unique request ID"""
    return str(uuid.uuid4())
