from .forms import FormRequest, FormSubmission, FormType, SafeFields, SubmissionOutcome
from .email import RecipientSet, RenderedEmail, Sender
from .upload import ImageUrlRequest, UploadErrorBody, UploadResult

__all__ = [
    "FormRequest",
    "FormSubmission",
    "FormType",
    "SafeFields",
    "SubmissionOutcome",
    "RecipientSet",
    "RenderedEmail",
    "Sender",
    "ImageUrlRequest",
    "UploadErrorBody",
    "UploadResult",
]
