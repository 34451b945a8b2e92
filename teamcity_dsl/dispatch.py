"""Map a TeamCity version to the generator adapter that understands it."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from .errors import UnsupportedVersion


class AdapterSelection(Enum):
    """Generator adapter families, valued by the module run in the child process."""

    V10 = "teamcity_dsl.adapters.v10"
    V2017_1 = "teamcity_dsl.adapters.v2017_1"
    V2017_2 = "teamcity_dsl.adapters.v2017_2"

    @property
    def module(self) -> str:
        return self.value


def select_adapter(version: Optional[str]) -> AdapterSelection:
    """Return the adapter for ``version``.

    Releases newer than 2017.2 keep using the 2017.2 adapter until a new
    one is introduced, so every non-blank version is accepted.
    """
    value = (version or "").strip()
    if not value:
        raise UnsupportedVersion("TeamCity version must not be empty")
    if value.startswith("10."):
        return AdapterSelection.V10
    if value.startswith("2017.1"):
        return AdapterSelection.V2017_1
    return AdapterSelection.V2017_2
