"""Actionable error catalog for dbinitializer."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "location_not_found": {
        "what": "No scripts found for location `{location}`.",
        "next": "Check the path or pattern, or prefix it with `optional:` if it may be absent.",
    },
    "script_encoding": {
        "what": "Script `{script}` could not be decoded as {encoding}: {reason}",
        "next": "Save the script with the configured encoding or change `--encoding`.",
    },
    "unterminated_script": {
        "what": "Script `{script}` ends inside an unterminated {mode} opened on line {line}.",
        "next": "Close the quote or block comment before the end of the script.",
    },
    "statement_failed": {
        "what": "Statement {index} of `{script}` (line {line}) failed: {error}",
        "next": "Fix the statement `{excerpt}` or enable `--continue-on-error`.",
    },
    "insecure_http": {
        "what": "Script location `{location}` uses insecure HTTP.",
        "next": "Switch to HTTPS or use `--allow-insecure-http` only for trusted endpoints.",
    },
    "remote_unavailable": {
        "what": "Script location `{location}` could not be fetched: {reason}",
        "next": "Check that the URL is reachable and returns the script content.",
    },
}


def actionable_error(code: str, **kwargs) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
