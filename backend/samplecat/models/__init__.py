from samplecat.models.refresh_token import RefreshToken
from samplecat.models.sample import Sample
from samplecat.models.user import MAX_FAILED_LOGIN_ATTEMPTS, Role, User

__all__ = [
    "MAX_FAILED_LOGIN_ATTEMPTS",
    "RefreshToken",
    "Role",
    "Sample",
    "User",
]
