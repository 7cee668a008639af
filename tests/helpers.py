"""Constants shared by the test modules."""

ORIGIN = "cdn.example.com"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 128
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 128
SLASH = "\\u002F"
