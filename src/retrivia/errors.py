"""Exceptions raised by the photobooth core."""


class PhotoboothError(Exception):
    """Base class for photobooth failures."""


class CaptureError(PhotoboothError):
    """The camera could not deliver a frame."""


class CameraUnavailableError(CaptureError):
    """The camera could not be opened (missing device or permission denied)."""


class ImageDecodeError(PhotoboothError):
    """An uploaded image or stored frame could not be decoded."""


class TrayFullError(PhotoboothError):
    """A photo was offered to a tray that already holds a full strip."""


class SessionAccessDenied(PhotoboothError):  # noqa: N818
    """The current identity does not own the session being modified."""


class NoActiveCropError(PhotoboothError):
    """A crop operation was requested while no imported photo is being cropped."""
