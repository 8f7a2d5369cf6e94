"""Testing utilities and fakes for the images transcoder."""

from .fakes import (
    FailingEncoder,
    FakeLogger,
    create_test_image,
    setup_test_input_tree,
    write_test_image,
)

__all__ = [
    "FailingEncoder",
    "FakeLogger",
    "create_test_image",
    "setup_test_input_tree",
    "write_test_image",
]
