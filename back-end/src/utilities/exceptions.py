from uuid import UUID


class ResumeNotFoundError(Exception):
    """Raised when a resume is absent or not visible to the requester"""

    def __init__(self, resume_id: UUID | str):
        self.resume_id = resume_id
        super().__init__(f"Resume {resume_id} not found")


class TemplateNotFoundError(Exception):
    """Raised when a template id does not exist"""

    def __init__(self, template_id: int):
        self.template_id = template_id
        super().__init__(f"Template {template_id} not found")


class StorageError(Exception):
    """Base exception for object storage errors"""

    pass


class StorageNotConfiguredError(StorageError):
    """Raised when the storage location (bucket) does not exist"""

    def __init__(self, bucket: str):
        self.bucket = bucket
        super().__init__(f"Storage bucket '{bucket}' does not exist")


class InvalidUploadError(StorageError):
    """Raised when an uploaded file is rejected (type, extension or content)"""

    pass


class UploadTooLargeError(StorageError):
    """Raised when an uploaded file exceeds the configured size limit"""

    pass
