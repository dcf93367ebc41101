class DomainError(Exception):
    """Base class for domain-level exceptions."""


class NotFound(DomainError):
    resource = "Resource"

    def __init__(self, resource_id) -> None:
        self.resource_id = resource_id
        super().__init__(f"{self.resource} with id {resource_id} not found!")


class PostNotFound(NotFound):
    resource = "Post"


class CommentNotFound(NotFound):
    resource = "Comment"


class UserNotFound(NotFound):
    resource = "User"


class ValidationError(DomainError, ValueError):
    pass


class BadRequest(DomainError):
    pass


class StoreError(DomainError):
    """The document store could not complete a call."""
