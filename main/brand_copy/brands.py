from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

from .errors import NoTargetBrands, UnknownBrandCode


BRAND_NAMES: dict[str, str] = {
    "M": "MLB",
    "I": "MLB KIDS",
    "X": "DISCOVERY",
    "V": "DUVETICA",
    "ST": "SERGIO TACCHINI",
}

# Records saved before brand tagging existed belong to this brand.
DEFAULT_BRAND_CODE = "M"


class BrandRegistry:
    """Closed mapping between short brand codes and display names."""

    def __init__(self, names: Mapping[str, str], default_code: str):
        if default_code not in names:
            raise ValueError(f"Default brand code {default_code!r} is not registered.")
        self._names = dict(names)
        self._codes_by_name = {name.casefold(): code for code, name in self._names.items()}
        self.default_code = default_code

    def resolve(self, code: str) -> str:
        try:
            return self._names[code]
        except (KeyError, TypeError):
            raise UnknownBrandCode(code) from None

    def all_codes(self) -> list[str]:
        return list(self._names)

    def code_for_name(self, name: Optional[str]) -> Optional[str]:
        if not name:
            return None
        return self._codes_by_name.get(name.strip().casefold())

    def validate(self, source_code: str, target_codes: Iterable[str]) -> list[str]:
        """Check every code up front; nothing is processed if one is bad."""
        self.resolve(source_code)
        targets = list(target_codes or [])
        if not targets:
            raise NoTargetBrands()
        for code in targets:
            self.resolve(code)
        return targets

    def effective_code(self, record: Mapping[str, Any]) -> Optional[str]:
        """Brand code a saved record belongs to.

        Queries carry ``brand``; insights carry ``brandName``. A record with
        neither is a legacy record and falls back to the default brand. An
        unrecognised ``brandName`` yields ``None`` so it never matches.
        """
        code = record.get("brand")
        if code:
            return code
        name = record.get("brandName")
        if name:
            return self.code_for_name(name)
        return self.default_code

    def options(self, exclude: Optional[str] = None) -> list[dict[str, str]]:
        return [
            {"code": code, "name": name}
            for code, name in self._names.items()
            if code != exclude
        ]


DEFAULT_REGISTRY = BrandRegistry(BRAND_NAMES, DEFAULT_BRAND_CODE)


def resolve(code: str) -> str:
    return DEFAULT_REGISTRY.resolve(code)


def all_codes() -> list[str]:
    return DEFAULT_REGISTRY.all_codes()
