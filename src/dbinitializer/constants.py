"""Reserved markers and defaults shared across dbinitializer."""

OPTIONAL_PREFIX = "optional:"
FILE_PREFIX = "file:"
CLASSPATH_PREFIX = "classpath:"

DEFAULT_SEPARATOR = ";"
DEFAULT_ENCODING = "utf-8"
END_OF_SCRIPT_SEPARATOR = "^^^ END OF SCRIPT ^^^"
FALLBACK_SEPARATOR = "\n"

LINE_COMMENT_PREFIX = "--"
BLOCK_COMMENT_START = "/*"
BLOCK_COMMENT_END = "*/"

STATEMENT_EXCERPT_LENGTH = 80
DEFAULT_DOWNLOAD_TIMEOUT = 60.0
DEFAULT_CONFIG_FILE = ".dbinitializer.yml"
