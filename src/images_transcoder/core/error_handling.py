# src/images_transcoder/core/error_handling.py

import functools

from PIL import Image, UnidentifiedImageError

from .exceptions import (
    EncodeError,
    ImageDecodeError,
    ImagesTranscoderError,
)
from .logging_config import get_logger


def with_error_handling(func):
    """
    A decorator to wrap codec functions with standardized error handling.

    Codec errors are translated into the transcoder's exception hierarchy
    based on what failed and where. The caller logs translated errors, so
    their traceback only goes to the debug log. Anything else is logged as
    an error and re-raised unchanged.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = get_logger("images-transcoder")
        try:
            return func(*args, **kwargs)
        except ImagesTranscoderError:
            raise
        except Exception as e:
            message = f"Error in '{func.__name__}': {e}"
            mapped = _translate(func.__name__, e)
            if mapped is None:
                logger.error(message, exc_info=True)
                raise
            logger.debug(message, exc_info=True)
            raise mapped from e
    return wrapper


def _translate(func_name, error):
    """Domain error for a codec failure, or None when it is not one."""
    if isinstance(error, (UnidentifiedImageError, Image.DecompressionBombError)):
        return ImageDecodeError(f"Failed to identify image in {func_name}: {error}")
    if func_name.startswith("decode") and isinstance(error, (OSError, SyntaxError, ValueError)):
        return ImageDecodeError(f"Failed to decode image in {func_name}: {error}")
    if func_name.startswith("encode") and isinstance(error, (OSError, ValueError, KeyError)):
        return EncodeError(f"Image encode error in {func_name}: {error}")
    return None


class BatchOperationContextManager:
    """
    Context manager for batch operations to collect and summarize errors.
    """
    def __init__(self, operation_name="Batch Operation"):
        self.operation_name = operation_name
        self.errors = []
        self.logger = get_logger("images-transcoder")

    def __enter__(self):
        self.logger.debug(f"Starting {self.operation_name}.")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.errors:
            self.logger.warning(
                f"{self.operation_name} completed with {len(self.errors)} error(s)."
            )
            for i, error_detail in enumerate(self.errors):
                item_identifier = error_detail.get('item', 'Unknown item')
                error_message = error_detail.get('error', 'Unknown error')
                self.logger.warning(
                    f"  Error {i+1}/{len(self.errors)} for item '{item_identifier}': {error_message}"
                )
        elif exc_type:
            self.logger.error(
                f"{self.operation_name} failed due to an unhandled exception: {exc_val}",
                exc_info=(exc_type, exc_val, exc_tb)
            )
        else:
            self.logger.debug(f"{self.operation_name} completed successfully.")

        # Exceptions raised inside the block always propagate
        return False

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def add_error(self, error_message: str, item_identifier: str = "Unknown item"):
        """
        Call this method within the 'with' block to report an error for a specific item.

        Args:
            error_message (str): The error message or exception string.
            item_identifier (str): A string identifying the item that failed (e.g., filename).
        """
        self.errors.append({"item": item_identifier, "error": str(error_message)})
        self.logger.debug(f"Error added for item '{item_identifier}' in {self.operation_name}: {error_message}")
