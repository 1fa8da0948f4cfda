"""Application-wide constants."""

OTP_LENGTH = 6
ADMIN_OTP_LENGTH = 4
DEFAULT_OTP = "111111"
MAX_CODE_ATTEMPTS = 3

PASSWORD_RESET_TOKEN_TTL_SECONDS = 15 * 60
PASSWORD_RESET_PURPOSE = "password-reset"

DEFAULT_TOKEN_EXPIRY_SECONDS = 7 * 24 * 60 * 60

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_PAGINATION_LIMIT = 100

API_PREFIX = "/api/v1"
