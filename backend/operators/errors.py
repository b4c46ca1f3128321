from enum import Enum
from uuid import UUID


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    DEPENDENCY_MISSING = "dependency_missing"
    CONFLICT = "conflict"
    PROVIDER_FAILURE = "provider_failure"
    INTERNAL = "internal"


class CreativeStudioError(Exception):
    """Base exception for creative studio operations."""

    kind: ErrorKind = ErrorKind.INTERNAL


class BriefValidationError(CreativeStudioError):
    """Raised when a brief transition is not allowed by its current state."""

    kind = ErrorKind.VALIDATION


class CopyLockedError(BriefValidationError):
    """Raised when copy is changed after it has been confirmed."""

    def __init__(self, message: str = "Cannot update copy after confirmation"):
        super().__init__(message)


class BriefNotFoundError(CreativeStudioError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, brief_id: UUID | None = None):
        self.brief_id = brief_id
        super().__init__("Brief not found")


class PackNotFoundError(CreativeStudioError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, pack_id: UUID | None = None):
        self.pack_id = pack_id
        super().__init__("Pack not found")


class AssetNotFoundError(CreativeStudioError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, asset_id: UUID | None = None):
        self.asset_id = asset_id
        super().__init__("Asset not found")


class BrandMemoryError(CreativeStudioError):
    kind = ErrorKind.VALIDATION


class BrandMemoryNotFoundError(BrandMemoryError):
    kind = ErrorKind.DEPENDENCY_MISSING

    def __init__(self, org_id: UUID | None = None):
        self.org_id = org_id
        super().__init__("Brand memory not found. Please set up brand identity first.")


class BrandKitNotFoundError(BrandMemoryError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, brand_kit_id: UUID | None = None):
        self.brand_kit_id = brand_kit_id
        super().__init__("Brand kit not found")


class BrandMemoryConflictError(BrandMemoryError):
    """Raised when concurrent updates keep colliding on the next version number."""

    kind = ErrorKind.CONFLICT

    def __init__(self, org_id: UUID, attempts: int):
        self.org_id = org_id
        self.attempts = attempts
        super().__init__(
            f"Brand memory update for org {org_id} conflicted {attempts} times. "
            f"Please retry."
        )


class ProviderError(CreativeStudioError):
    """Raised when an image or chat provider fails or returns nothing usable."""

    kind = ErrorKind.PROVIDER_FAILURE
