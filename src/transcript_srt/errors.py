"""Errors surfaced to API clients."""


class TranscriptSrtError(Exception):
    """Base class; carries the HTTP status and the message shown to the client."""

    status_code = 500
    user_message = "An internal server error occurred."


class UploadError(TranscriptSrtError):
    """Writing the temporary file or submitting it to the service failed."""

    user_message = "Error uploading file"


class ServiceUnavailable(TranscriptSrtError):
    """The service kept failing with server errors while polling."""

    user_message = "Transcription API is currently unavailable. Please try again later."


class ProcessingFailed(TranscriptSrtError):
    """The service marked the uploaded file as FAILED."""

    user_message = (
        "Unfortunately this file couldn't be processed. "
        "The file may be corrupt or in an unsupported format."
    )


class MalformedRequestBody(TranscriptSrtError):
    status_code = 400
    user_message = "Invalid JSON body."
