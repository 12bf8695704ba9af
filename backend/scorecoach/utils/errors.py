class QuestionPipelineError(Exception):
    """Base class for failures inside the report -> questions pipeline."""


class ParseAmbiguity(QuestionPipelineError):
    """Raised internally when a report fragment is recognized but unusable.

    The parser catches it and records the message on the report; it never
    reaches callers.
    """


class GenerationServiceError(QuestionPipelineError):
    """Raised when the text-generation service fails or times out."""
    def __init__(self, message, cause=None):
        self.message = message
        self.cause = cause
        super().__init__(self.message)


class MalformedResponse(QuestionPipelineError):
    """Raised when no question array can be recovered from a response."""
    def __init__(self, raw_text, message=None):
        self.raw_text = raw_text
        self.message = message or "Could not recover a JSON array of questions from the response"
        super().__init__(self.message)


class InsufficientResults(QuestionPipelineError):
    """Raised when fewer questions were produced than requested."""
    def __init__(self, produced, requested):
        self.produced = produced
        self.requested = requested
        self.message = f"Produced {produced} of {requested} requested questions"
        super().__init__(self.message)
