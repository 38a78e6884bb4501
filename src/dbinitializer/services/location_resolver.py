"""Location resolution service for dbinitializer."""

from typing import Iterable, List, Tuple

from dbinitializer.constants import OPTIONAL_PREFIX
from dbinitializer.errors import LocationNotFoundError
from dbinitializer.errors_catalog import actionable_error
from dbinitializer.models import ScriptLocation


class LocationResolver:
    """Expands location patterns into ordered script handles."""

    def __init__(
        self,
        content_access,
        logger,
        optional_prefix: str = OPTIONAL_PREFIX,
        case_sensitive_prefix: bool = True,
    ):
        self.content_access = content_access
        self.logger = logger
        self.optional_prefix = optional_prefix
        self.case_sensitive_prefix = case_sensitive_prefix

    def split_optional(self, pattern: str) -> Tuple[str, bool]:
        candidate = pattern.strip()
        head = candidate[: len(self.optional_prefix)]
        if self.case_sensitive_prefix:
            matches = head == self.optional_prefix
        else:
            matches = head.lower() == self.optional_prefix.lower()

        if matches:
            return candidate[len(self.optional_prefix):].strip(), True
        return candidate, False

    def resolve(self, patterns: Iterable[str]) -> List[ScriptLocation]:
        locations: List[ScriptLocation] = []

        for pattern in patterns:
            location, optional = self.split_optional(pattern)
            handles = tuple(sorted(self.content_access.open(location), key=lambda h: h.name))

            if not handles:
                if optional:
                    self.logger.debug("Skipping missing optional location: %s", location)
                    continue
                raise LocationNotFoundError(
                    location, actionable_error("location_not_found", location=location)
                )

            self.logger.debug("Location %s resolved to %s script(s)", location, len(handles))
            locations.append(ScriptLocation(pattern=location, optional=optional, handles=handles))

        return locations
