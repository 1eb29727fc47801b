"""Command Catalog — the mCaptcha cache module's name and command surface, in one place.

Invariants:
    - Catalog is frozen; MCAPTCHA_CATALOG is the only instance the client uses
    - commands() yields all five command names; capability checks iterate every entry
    - Names are case-sensitive wire strings

Design Decisions:
    - Frozen dataclass over scattered constants: a protocol bump touches one object
    - MODULE_NAME keeps the module's own registered spelling ("cahce"), not a corrected one
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class CommandCatalog:
    """Wire names for the module and its commands."""
    module_name: str
    get: str
    add_visitor: str
    delete_captcha: str
    add_captcha: str
    captcha_exists: str

    def commands(self) -> tuple[str, ...]:
        """All command names, in verification order."""
        return (
            self.add_visitor,
            self.add_captcha,
            self.delete_captcha,
            self.captcha_exists,
            self.get,
        )


MCAPTCHA_CATALOG = CommandCatalog(
    module_name="mcaptcha_cahce",
    get="MCAPTCHA_CACHE.GET",
    add_visitor="MCAPTCHA_CACHE.ADD_VISITOR",
    delete_captcha="MCAPTCHA_CACHE.DELETE_CAPTCHA",
    add_captcha="MCAPTCHA_CACHE.ADD_CAPTCHA",
    captcha_exists="MCAPTCHA_CACHE.CAPTCHA_EXISTS",
)
