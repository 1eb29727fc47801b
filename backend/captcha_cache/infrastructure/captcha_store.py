"""mCaptcha Store — Redis store verified to carry the mCaptcha cache module.

Invariants:
    - CaptchaStore.connect() runs verify_module() exactly once, before the store is returned
    - No CaptchaStore exists without a verified module (verification failure is fatal)
    - Each domain method issues exactly one command and interprets exactly one reply
    - Transport failures surface as StoreError; reply-shape failures as
      ModuleProtocolError / DeserializationError; nothing is retried or swallowed
    - CAPTCHA_EXISTS polarity is the module's: 0 → exists, 1 → missing

Design Decisions:
    - Verification at construction, not lazily: startup fails fast and no lock is needed
      because the object is not shared until connect() returns
    - Singleton captcha_store initialized on startup (ADR: no global import side effects)
"""

import logging

from pydantic import ValidationError

from captcha_cache.config import Settings
from captcha_cache.core.command_catalog import CommandCatalog, MCAPTCHA_CATALOG
from captcha_cache.core.errors import (
    CaptchaCacheError, DeserializationError, ErrorContext,
    ModuleCommandNotFoundError, ModuleNotLoadedError, ModuleProtocolError,
)
from captcha_cache.core.response_decoding import (
    CommandInfoStatus, EXISTS_FLAG_MEANING,
    decode_command_info, decode_integer, decode_text, module_listed,
)
from captcha_cache.core.store_config import StoreConfig
from captcha_cache.infrastructure.observability import setup_logging
from captcha_cache.infrastructure.store import Store, StoreConnection
from captcha_cache.schemas.captcha import (
    AddSite, AddVisitor, AddVisitorResult, serialize_captcha_config,
)

logger = logging.getLogger(__name__)


class CaptchaStoreConnection:
    """Connection that speaks the mCaptcha module's command set."""

    def __init__(
        self, conn: StoreConnection, catalog: CommandCatalog = MCAPTCHA_CATALOG,
    ):
        self._conn = conn
        self._catalog = catalog

    async def verify_module(self) -> None:
        """Check that the module and every catalog command are loaded.

        Raises ModuleNotLoadedError or ModuleCommandNotFoundError.
        """
        module_name = self._catalog.module_name
        listing = await self._conn.exec("MODULE LIST", operation="MODULE LIST")
        if not module_listed(listing, module_name):
            logger.error(
                f"Redis module {module_name} not loaded",
                extra={"error_code": "MODULE_NOT_LOADED"},
            )
            raise ModuleNotLoadedError(module_name)

        for command in self._catalog.commands():
            reply = await self._conn.exec(
                "COMMAND INFO", command, operation="COMMAND INFO",
            )
            status = decode_command_info(reply)
            if status is CommandInfoStatus.ABSENT:
                logger.error(
                    f"Redis module command {command} not found",
                    extra={"command": command, "error_code": "MODULE_COMMAND_NOT_FOUND"},
                )
                raise ModuleCommandNotFoundError(command)
            if status is CommandInfoStatus.MALFORMED:
                logger.warning(
                    f"Unrecognised COMMAND INFO reply for {command}, assuming present",
                    extra={"command": command, "response_value": repr(reply)},
                )
        logger.info(f"Redis module {module_name} verified")

    async def add_visitor(self, msg: AddVisitor) -> AddVisitorResult | None:
        """Add visitor"""
        command = self._catalog.add_visitor
        reply = decode_text(
            await self._conn.exec(command, msg.id, key=msg.id, operation=command),
        )
        if reply is None:
            return None
        try:
            return AddVisitorResult.model_validate_json(reply)
        except ValidationError as e:
            logger.error(
                f"Could not parse {command} reply: {e}",
                extra={"command": command, "captcha_id": msg.id},
            )
            raise DeserializationError(
                command, reply, str(e), ErrorContext(captcha_id=msg.id),
            ) from e

    async def add_captcha(self, msg: AddSite) -> None:
        """Register new mCaptcha with Redis"""
        command = self._catalog.add_captcha
        payload = serialize_captcha_config(msg.config)
        await self._conn.exec(command, msg.id, payload, key=msg.id, operation=command)

    async def captcha_exists(self, captcha: str) -> bool:
        """Check if an mCaptcha object is available in Redis"""
        command = self._catalog.captcha_exists
        reply = await self._conn.exec(command, captcha, key=captcha, operation=command)
        flag = decode_integer(reply)
        if flag not in EXISTS_FLAG_MEANING:
            raise self._protocol_error(command, captcha, reply)
        return EXISTS_FLAG_MEANING[flag]

    async def delete_captcha(self, captcha: str) -> None:
        """Delete an mCaptcha object from Redis"""
        command = self._catalog.delete_captcha
        await self._conn.exec(command, captcha, key=captcha, operation=command)

    async def get_visitors(self, captcha: str) -> int:
        """Get number of visitors of an mCaptcha object from Redis"""
        command = self._catalog.get
        reply = await self._conn.exec(command, captcha, key=captcha, operation=command)
        visitors = decode_integer(reply)
        if visitors is None or visitors < 0:
            raise self._protocol_error(command, captcha, reply)
        return visitors

    def _protocol_error(self, command: str, captcha: str, reply) -> ModuleProtocolError:
        logger.error(
            f"mCaptcha redis module responded with {reply!r} for {command}",
            extra={
                "command": command, "captcha_id": captcha,
                "response_value": repr(reply), "error_code": "MODULE_PROTOCOL_ERROR",
            },
        )
        return ModuleProtocolError(command, reply, ErrorContext(captcha_id=captcha))


async def _close_after_failed_verification(store: Store) -> None:
    """Close the store; a close failure must not mask the verification error."""
    try:
        await store.close()
    except Exception as e:
        logger.warning(
            f"Closing store after failed verification also failed: {e}",
            exc_info=True,
        )


class CaptchaStore:
    """Redis store with the mCaptcha module verified to be loaded.

    Build with `await CaptchaStore.connect(config)`; the constructor itself
    does no IO and is used when the Store is already set up.
    """

    def __init__(self, store: Store, catalog: CommandCatalog = MCAPTCHA_CATALOG):
        self.store = store
        self.catalog = catalog

    @classmethod
    async def connect(
        cls, config: StoreConfig, catalog: CommandCatalog = MCAPTCHA_CATALOG,
    ) -> "CaptchaStore":
        store = await Store.connect(config)
        return await cls.verified(store, catalog)

    @classmethod
    async def verified(
        cls, store: Store, catalog: CommandCatalog = MCAPTCHA_CATALOG,
    ) -> "CaptchaStore":
        """Wrap an existing Store after running the module check once."""
        captcha_store = cls(store, catalog)
        try:
            await captcha_store.get_client().verify_module()
        except CaptchaCacheError:
            await _close_after_failed_verification(store)
            raise
        return captcha_store

    def get_client(self) -> CaptchaStoreConnection:
        return CaptchaStoreConnection(self.store.get_client(), self.catalog)

    async def health_check(self) -> bool:
        return await self.store.health_check()

    async def close(self) -> None:
        await self.store.close()


# Singleton (initialized on startup)
captcha_store: CaptchaStore | None = None


async def init_captcha_store(settings: Settings) -> CaptchaStore:
    """Process startup: configure logging, connect, verify the module."""
    global captcha_store
    setup_logging(settings.log_level, settings.log_format)
    captcha_store = await CaptchaStore.connect(settings.store_config())
    return captcha_store


def get_captcha_store() -> CaptchaStore:
    if not captcha_store:
        raise RuntimeError("Captcha store not initialized")
    return captcha_store


async def close_captcha_store() -> None:
    global captcha_store
    if captcha_store:
        await captcha_store.close()
        captcha_store = None
