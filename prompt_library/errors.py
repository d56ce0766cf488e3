"""Error taxonomy shared by the services and the HTTP layer."""


class PromptLibraryError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PromptLibraryError):
    status_code = 400


class CategoryNotEmptyError(ValidationError):
    def __init__(self, message: str = "Cannot delete category that contains prompts"):
        super().__init__(message)


class AuthError(PromptLibraryError):
    status_code = 401


class ForbiddenError(PromptLibraryError):
    status_code = 403


class NotFoundError(PromptLibraryError):
    status_code = 404


class ConflictError(PromptLibraryError):
    status_code = 409


class InternalError(PromptLibraryError):
    status_code = 500
