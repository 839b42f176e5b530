from __future__ import annotations

import fnmatch
import logging
from collections.abc import Iterable

logger = logging.getLogger(__name__)

NON_CODE_EXTENSIONS = {
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".svg",
    ".ico",
    ".webp",
    ".bmp",
    ".pdf",
    ".woff",
    ".woff2",
    ".ttf",
    ".eot",
    ".otf",
    ".mp4",
    ".mp3",
    ".wav",
    ".ogg",
    ".zip",
    ".tar",
    ".gz",
    ".rar",
    ".7z",
    ".wasm",
    ".lock",  # e.g. package-lock.json, Pipfile.lock
}

DEFAULT_PATH_FILTERS = [
    "!dist/**",
    "!**/*.pb.go",
    "!**/*.lock",
    "!**/*.mod",
    "!**/*.sum",
    "!**/*.work",
    "!**/*.md5sum",
    "!**/gen/**",
    "!**/_gen/**",
    "!**/generated/**",
    "!**/vendor/**",
]


def is_code_file(file_name: str) -> bool:
    return not any(file_name.lower().endswith(ext) for ext in NON_CODE_EXTENSIONS)


def _matches(path: str, rule: str) -> bool:
    """Glob match with directory-prefix support.

    - "src/*.py" and "dist/**" match on the full path ("*" crosses "/")
    - "**/x" also matches "x" at the repository root
    - a plain name such as "migrations" or "migrations/" matches anything in that tree
    """
    if fnmatch.fnmatch(path, rule):
        return True
    if rule.startswith("**/") and fnmatch.fnmatch(path, rule[3:]):
        return True
    if not any(ch in rule for ch in "*?["):
        prefix = rule.rstrip("/") + "/"
        if path.startswith(prefix) or ("/" + prefix) in path:
            return True
    return False


class PathFilter:
    """Include/exclude rules; a leading "!" marks an exclusion.

    A path passes when it matches an inclusion rule (or there are none) and
    matches no exclusion rule.
    """

    def __init__(self, rules: Iterable[str] | None = None):
        self.rules: list[tuple[str, bool]] = []
        for rule in rules or []:
            trimmed = (rule or "").strip()
            if not trimmed:
                continue
            if trimmed.startswith("!"):
                self.rules.append((trimmed[1:].strip(), True))
            else:
                self.rules.append((trimmed, False))

    def check(self, path: str) -> bool:
        if not self.rules:
            return True

        included = excluded = inclusion_rule_exists = False
        for rule, exclude in self.rules:
            if _matches(path, rule):
                if exclude:
                    excluded = True
                else:
                    included = True
            if not exclude:
                inclusion_rule_exists = True

        result = (not inclusion_rule_exists or included) and not excluded
        logger.debug("checking path: %s => %s", path, result)
        return result
