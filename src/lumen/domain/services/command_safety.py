"""Static dangerous-command filter.

This is an advisory blocklist, not a sandbox. It catches the obvious
forms of a handful of destructive commands; a sufficiently obfuscated
command (variable expansion, encoding, aliases) will pass through.
Anything that must be contained needs OS-level isolation.
"""

import re

DANGEROUS_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(pattern)
    for pattern in (
        # recursive delete of the filesystem root
        r"\brm\s+-(?:rf|fr)\s+/\*?(?:$|\s)",
        # fork bomb
        r":\(\)\s*\{.*:\s*\|\s*:.*\}",
        # raw disk devices
        r"/dev/(?:sd[a-z]|hd[a-z]|nvme\d)",
        # filesystem format utilities
        r"\bmkfs\b",
        # raw disk dumps
        r"\bdd\s+if=",
        # system credential files
        r"/etc/(?:passwd|shadow)\b",
        # download piped into a shell
        r"\b(?:curl|wget)\b.*\|\s*(?:sudo\s+)?(?:ba|z)?sh\b",
    )
)


def is_dangerous(command: str) -> bool:
    """Return True if the command matches any dangerous pattern.

    Pure function: the same input always yields the same output.
    """
    return any(pattern.search(command) for pattern in DANGEROUS_PATTERNS)
