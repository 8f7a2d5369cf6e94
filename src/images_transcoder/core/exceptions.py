"""Custom exceptions for the images transcoder."""


class ImagesTranscoderError(Exception):
    """Base exception for all images transcoder errors."""


class ConfigurationError(ImagesTranscoderError):
    """Error raised for invalid configuration options."""


class ImageDecodeError(ImagesTranscoderError):
    """Error raised when a source file cannot be opened or decoded."""


class EncodeError(ImagesTranscoderError):
    """Error raised when an image cannot be encoded to the target format."""


class ArchiveError(ImagesTranscoderError):
    """Error raised for output archive failures."""


class HandoffClosedError(ImagesTranscoderError):
    """Error raised when pushing into a hand-off queue that was closed."""
