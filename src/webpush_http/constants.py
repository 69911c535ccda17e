"""
Protocol constants for Web Push message encryption (``aesgcm`` content encoding).

Reference: draft-ietf-webpush-encryption-04, draft-ietf-httpbis-encryption-encoding-03
"""

from typing import Final

# =============================================================================
# KEY AGREEMENT (P-256)
# =============================================================================

CURVE_NAME: Final = "P-256"
PUBLIC_KEY_SIZE: Final = 65  # X9.62 uncompressed point: 0x04 || X || Y
UNCOMPRESSED_POINT_PREFIX: Final = 0x04
PRIVATE_KEY_SIZE: Final = 32
SHARED_SECRET_SIZE: Final = 32
AUTH_SECRET_SIZE: Final = 16

# =============================================================================
# KEY DERIVATION (HKDF-SHA256)
# =============================================================================

SALT_SIZE: Final = 16
PRK_SIZE: Final = 32
HKDF_MAX_SINGLE_ROUND: Final = 32  # SHA-256 output size
CONTENT_ENCRYPTION_KEY_SIZE: Final = 16
NONCE_SIZE: Final = 12

# 0x00 || u16(65) || client_pk || u16(65) || server_pk
CONTEXT_SIZE: Final = 1 + 2 + PUBLIC_KEY_SIZE + 2 + PUBLIC_KEY_SIZE

INFO_PREFIX: Final = b"Content-Encoding: "
AUTH_LABEL: Final = b"auth"
AESGCM_LABEL: Final = b"aesgcm"
NONCE_LABEL: Final = b"nonce"

# =============================================================================
# PAYLOAD CIPHER (AES-128-GCM)
# =============================================================================

AES_GCM_TAG_SIZE: Final = 16
PADDING_LENGTH_PREFIX_SIZE: Final = 2
RECORD_SIZE: Final = 4096

# Largest message + padding that fits a single record
MAX_PAYLOAD_SIZE: Final = RECORD_SIZE - AES_GCM_TAG_SIZE - PADDING_LENGTH_PREFIX_SIZE
MAX_PADDING_LENGTH: Final = 0xFFFF

# =============================================================================
# HTTP DELIVERY
# =============================================================================

CONTENT_ENCODING: Final = "aesgcm"

HEADER_CONTENT_ENCODING: Final = "Content-Encoding"
HEADER_ENCRYPTION: Final = "Encryption"
HEADER_CRYPTO_KEY: Final = "Crypto-Key"
HEADER_AUTHORIZATION: Final = "Authorization"
HEADER_TTL: Final = "TTL"

# Legacy bulk-messaging gateway and its Web Push compatible replacement
GCM_URL: Final = "https://android.googleapis.com/gcm/send"
TEMP_GCM_URL: Final = "https://gcm-http.googleapis.com/gcm"
