"""
Custom exceptions for better error handling and user feedback
"""


class NomadNestError(Exception):
    """Base class for domain errors"""
    status_code = 400


class DocumentNotFoundError(NomadNestError):
    """Raised when a document id does not exist in a collection"""
    status_code = 404

    def __init__(self, collection: str, doc_id: str, label: str = None):
        self.collection = collection
        self.doc_id = doc_id
        super().__init__(f"{label or 'Document'} not found")


class DuplicateDocumentError(NomadNestError):
    """Raised when inserting a document whose id is already taken"""
    status_code = 409

    def __init__(self, collection: str, doc_id: str):
        self.collection = collection
        self.doc_id = doc_id
        super().__init__(
            f"Document {doc_id} already exists in {collection}")


class InvalidQueryError(NomadNestError):
    """Raised for unknown filter or update operators"""
    status_code = 400


class PermissionDeniedError(NomadNestError):
    """Raised when the caller may not act on a resource"""
    status_code = 403


class QuotaExceededError(NomadNestError):
    """Raised when a free account reaches a plan limit"""
    status_code = 402


class ConflictError(NomadNestError):
    """Raised when a request conflicts with existing state"""
    status_code = 409


class BackupFormatError(NomadNestError):
    """Raised when a restore payload is not a valid backup"""
    status_code = 400

    def __init__(self, reason: str):
        super().__init__(f"Invalid backup file format: {reason}")


class AuthenticationError(NomadNestError):
    """Raised when credentials do not match"""
    status_code = 401

    def __init__(self):
        super().__init__("Invalid email or password")
