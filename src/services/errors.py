class ServiceError(Exception):
    pass


class RateLimitedError(ServiceError):
    pass


class CompletionFailedError(ServiceError):
    pass


class GeminiConfigurationError(ServiceError):
    pass


class GeminiPromptError(ServiceError):
    pass


class InvalidAssistantRequestError(ServiceError):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
