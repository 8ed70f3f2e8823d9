"""
Cache de consultas com janela de frescor.
Entradas frescas são servidas sem nova requisição; buscas simultâneas da
mesma chave compartilham uma única requisição; mutações invalidam por prefixo.
"""
import asyncio
import time
from typing import Any, Awaitable, Callable, Dict, Hashable, Optional, Tuple

from person_nexus import config
from person_nexus.logger import get_logger

logger = get_logger(__name__)

QueryKey = Tuple[Hashable, ...]


class QueryCache:
    def __init__(self, stale_time: float = config.PEOPLE_STALE_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.stale_time = stale_time
        self.clock = clock
        self._entries: Dict[QueryKey, Tuple[float, Any]] = {}
        self._in_flight: Dict[QueryKey, "asyncio.Future[Any]"] = {}

    def is_fresh(self, key: QueryKey) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return False
        fetched_at, _ = entry
        return (self.clock() - fetched_at) < self.stale_time

    def peek(self, key: QueryKey) -> Optional[Any]:
        """Último valor armazenado (fresco ou não), ou None."""
        entry = self._entries.get(key)
        return entry[1] if entry is not None else None

    async def get_or_fetch(self, key: QueryKey, fetcher: Callable[[], Awaitable[Any]]) -> Any:
        """
        Devolve o valor da chave, buscando-o apenas se ausente ou vencido.
        Falhas do fetcher propagam e não são armazenadas. Se a busca
        compartilhada for cancelada, quem aguardava faz a própria busca.
        """
        if self.is_fresh(key):
            logger.debug(f"Cache fresco para key={key}")
            return self._entries[key][1]
        pending = self._in_flight.get(key)
        if pending is not None:
            try:
                return await asyncio.shield(pending)
            except asyncio.CancelledError:
                # busca compartilhada cancelada pelo dono: refaz com uma busca própria
                if not pending.cancelled():
                    raise
                logger.debug(f"Busca compartilhada cancelada, refazendo key={key}")
                return await self.get_or_fetch(key, fetcher)

        loop = asyncio.get_running_loop()
        future: "asyncio.Future[Any]" = loop.create_future()
        self._in_flight[key] = future
        try:
            value = await fetcher()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as exc:
            future.set_exception(exc)
            # marca a exceção como consumida quando ninguém mais aguarda
            future.exception()
            raise
        else:
            self._entries[key] = (self.clock(), value)
            future.set_result(value)
            logger.debug(f"Cache atualizado para key={key}")
            return value
        finally:
            self._in_flight.pop(key, None)

    def invalidate(self, prefix: QueryKey = ()) -> int:
        """
        Remove as entradas cuja chave começa com o prefixo.
        Retorno:
            int: quantidade de entradas removidas
        """
        stale = [key for key in self._entries if key[:len(prefix)] == prefix]
        for key in stale:
            del self._entries[key]
        if stale:
            logger.info(f"Cache invalidado: prefix={prefix} entradas={len(stale)}")
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()
