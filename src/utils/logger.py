"""
Structured Logging System for Stitchbook
Provides rotating file logs with immediate flush for real-time monitoring
"""
import logging
from pathlib import Path
from logging.handlers import RotatingFileHandler


class StitchLogger:
    """Centralized logging for Stitchbook with rotation and formatting"""

    def __init__(self, name="Stitchbook", log_dir="logs", log_level="INFO",
                 max_mb=10, backup_count=5):
        """
        Initialize logger with rotating file handlers

        Args:
            name: Logger name
            log_dir: Directory for log files
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            max_mb: Size of the main log file before it rotates
            backup_count: Rotated main log files to keep
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

        # Clear any existing handlers
        self.logger.handlers.clear()

        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        log_format = logging.Formatter(
            '[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        # 1. Main rotating file handler
        main_handler = RotatingFileHandler(
            log_path / 'stitchbook.log',
            maxBytes=max_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding='utf-8'
        )
        main_handler.setLevel(logging.DEBUG)
        main_handler.setFormatter(log_format)
        self.logger.addHandler(main_handler)

        # 2. Error-only log file (5MB per file, keep 3 files)
        error_handler = RotatingFileHandler(
            log_path / 'errors.log',
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
            encoding='utf-8'
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(log_format)
        self.logger.addHandler(error_handler)

        # 3. Console handler
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(log_format)
        self.logger.addHandler(console_handler)

    def debug(self, message, component=""):
        """Log debug message"""
        self._log(logging.DEBUG, message, component)

    def info(self, message, component=""):
        """Log info message"""
        self._log(logging.INFO, message, component)

    def warning(self, message, component=""):
        """Log warning message"""
        self._log(logging.WARNING, message, component)

    def error(self, message, component="", exc_info=False):
        """Log error message"""
        self._log(logging.ERROR, message, component, exc_info=exc_info)

    def critical(self, message, component="", exc_info=False):
        """Log critical message"""
        self._log(logging.CRITICAL, message, component, exc_info=exc_info)

    def _log(self, level, message, component="", exc_info=False):
        """Internal logging method with component prefix"""
        if component:
            message = f"[{component}] {message}"

        self.logger.log(level, message, exc_info=exc_info)

        for handler in self.logger.handlers:
            handler.flush()

    def log_design_added(self, design_id, design_number, total_price):
        """Log a new catalog entry"""
        self.info(
            f"Design {design_number} ({design_id}) added with total price {total_price:.2f}",
            component="Catalog"
        )

    def log_design_removed(self, design_id):
        """Log a catalog deletion"""
        self.info(f"Design {design_id} removed", component="Catalog")

    def log_bill_saved(self, bill_number, customer_name, item_count, total):
        """Log a finalized bill"""
        self.info(
            f"Bill {bill_number} saved for '{customer_name}' - {item_count} item(s), total {total:.2f}",
            component="Billing"
        )

    def log_recognition(self, image_name, design_number, processing_time):
        """Log a design-number recognition outcome"""
        outcome = design_number if design_number else "no match"
        self.info(
            f"Recognition on {image_name} -> {outcome} in {processing_time:.2f}s",
            component="OCR"
        )

    def log_export(self, bill_number, fmt, path):
        """Log a bill export"""
        self.info(f"Bill {bill_number} exported as {fmt.upper()}: {path}", component="Export")


# Global logger instance
_global_logger = None


def get_logger(log_level=None):
    """Get or create global logger instance"""
    global _global_logger
    if _global_logger is None:
        import config
        _global_logger = StitchLogger(
            log_dir=config.LOG_FOLDER,
            log_level=log_level or config.LOG_LEVEL,
            max_mb=config.LOG_FILE_MAX_MB,
            backup_count=config.LOG_FILE_BACKUP_COUNT,
        )
    return _global_logger
