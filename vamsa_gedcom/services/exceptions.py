"""
Custom exceptions for service layer
"""

import functools

from vamsa_gedcom.shared.gedcom_parser import GedcomParseError


class ServiceError(Exception):
    """Base exception for service layer errors"""
    pass

class ValidationError(ServiceError):
    """Raised when input validation fails"""
    pass

class NotFoundError(ServiceError):
    """Raised when a requested file or resource is not found"""
    pass

class ConflictError(ServiceError):
    """Raised when an operation conflicts with current state"""
    pass

class ParseError(ServiceError):
    """Raised when GEDCOM content cannot be parsed or decoded"""
    pass


def handle_service_exceptions(logger=None):
    """Decorator to convert low level failures into service-specific exceptions"""
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except ServiceError:
                # Re-raise our own service errors
                raise
            except GedcomParseError as e:
                if logger:
                    logger.error(f"GEDCOM parse error in {func.__name__}: {e}")
                raise ParseError(f"Invalid GEDCOM: {e}") from e
            except UnicodeDecodeError as e:
                if logger:
                    logger.error(f"Decoding error in {func.__name__}: {e}")
                raise ParseError(f"Unable to decode GEDCOM content: {e}") from e
            except FileNotFoundError as e:
                if logger:
                    logger.error(f"File not found in {func.__name__}: {e}")
                raise NotFoundError(f"File not found: {e.filename}") from e
            except OSError as e:
                if logger:
                    logger.error(f"I/O error in {func.__name__}: {e}")
                raise ServiceError(f"File operation failed: {e}") from e
            except ValueError as e:
                if logger:
                    logger.error(f"Validation error in {func.__name__}: {e}")
                raise ValidationError(f"Invalid input: {e}") from e
            except KeyError as e:
                if logger:
                    logger.error(f"Missing required data in {func.__name__}: {e}")
                raise ValidationError(f"Missing required field: {e}") from e
            except Exception as e:
                if logger:
                    logger.error(f"Unexpected error in {func.__name__}: {e}", exc_info=True)
                raise ServiceError(f"Unexpected service error: {e}") from e
        return wrapper
    return decorator
