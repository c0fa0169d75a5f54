from __future__ import annotations

import logging
from dataclasses import dataclass


log = logging.getLogger(__name__)

DEFAULT_COUNTRY_CODE = "US"


@dataclass(frozen=True)
class Country:
    code: str = DEFAULT_COUNTRY_CODE

    @classmethod
    def from_code(cls, raw: "str | Country | None") -> "Country":
        if isinstance(raw, Country):
            return raw
        code = str(raw or "").strip().upper()
        if len(code) == 2 and code.isascii() and code.isalpha():
            return cls(code=code)
        if raw:
            log.debug("Unrecognized country code %r; using %s", raw, DEFAULT_COUNTRY_CODE)
        return cls()

    @property
    def query_value(self) -> str:
        return self.code.lower()
