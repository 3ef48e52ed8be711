"""Exception types for Grid Sheet Maker.

Each error carries a short ``user_message`` suitable for a dialog or the
status bar; ``str(err)`` keeps the technical detail for the log.
"""


class GridSheetError(Exception):
    """Base class for all application errors."""

    user_message = "Error generating PDF. Please try again."


class InvalidGeometryError(GridSheetError):
    """The configured grid does not fit on the page."""

    @property
    def user_message(self) -> str:
        return str(self)


class NoImageError(GridSheetError):
    user_message = "Upload an image before generating a PDF."


class ImageDecodeError(GridSheetError):
    """An uploaded file could not be decoded as an image."""

    user_message = "Could not read the image file."


class ImageEncodingError(GridSheetError):
    """The loaded image could not be handed to the PDF engine."""

    user_message = "The image could not be embedded in the PDF."


class ExportWriteError(GridSheetError):
    """The PDF could not be written to the chosen location."""

    user_message = "Could not save the PDF. Check that the folder is writable."
