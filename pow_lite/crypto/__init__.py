from .varint import decode_varint, encode_varint
from .header import (
    DEFAULT_NONCE_OFFSET,
    HeaderLayout,
    encode_nonce,
    extract_nonce,
    insert_nonce,
    parse_header,
    resolve_nonce_offset,
)
from .target import meets_target, meets_target_batch, parse_target
