"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_HOURS = 4
MIN_PASSWORD_LENGTH = 6

LEAVE_ATTACHMENT_MAX_BYTES = 20 * 1024 * 1024
PHOTO_MAX_BYTES = 10 * 1024 * 1024

LEAVE_ATTACHMENT_EXTENSIONS = frozenset({".pdf", ".jpg", ".jpeg", ".png"})
LEAVE_ATTACHMENT_MIME_TYPES = frozenset({"application/pdf", "image/jpeg", "image/jpg", "image/png"})
PHOTO_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png"})
PHOTO_MIME_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png"})

SELFIE_FOLDER = "selfies"
LEAVE_ATTACHMENT_FOLDER = "leave_attachments"
PROFILE_PICTURE_FOLDER = "profile_pictures"

PASSWORD_RESET_TTL_MINUTES = 15
RESET_OTP_DIGITS = 6
