import itertools
from typing import Any, Dict, List, Optional
import logging

import aiohttp

from config import settings, get_sui_rpc_url

logger = logging.getLogger(__name__)

MAX_MULTI_GET_IDS = 50


class SuiRpcError(RuntimeError):
    """JSON-RPC level error returned by the Sui fullnode"""

    def __init__(self, method: str, error: Dict[str, Any]):
        self.method = method
        self.code = error.get('code')
        self.error = error
        super().__init__(f"{method} failed ({self.code}): {error.get('message')}")


class SuiClient:
    """Minimal Sui JSON-RPC client for object reads"""

    def __init__(self, rpc_url: Optional[str] = None, timeout: Optional[float] = None):
        self.rpc_url = rpc_url or get_sui_rpc_url()
        self.timeout = timeout or settings.RPC_TIMEOUT
        self.session: Optional[aiohttp.ClientSession] = None
        self._ids = itertools.count(1)

    async def connect(self):
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            logger.info(f"[Sui] Client initialized for {self.rpc_url}")

    async def close(self):
        if self.session:
            await self.session.close()
            self.session = None

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _call(self, method: str, params: List[Any]) -> Any:
        if not self.session:
            raise RuntimeError("Session not initialized. Use async context manager.")

        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params
        }

        try:
            async with self.session.post(self.rpc_url, json=payload) as response:
                response.raise_for_status()
                data = await response.json()
        except aiohttp.ClientError as e:
            logger.error(f"[Sui] {method} transport error: {e}")
            raise

        if data.get('error'):
            raise SuiRpcError(method, data['error'])
        return data.get('result')

    @staticmethod
    def _object_options(show_type: bool, show_content: bool) -> Dict[str, bool]:
        return {"showType": show_type, "showContent": show_content}

    async def get_object(
        self,
        object_id: str,
        show_type: bool = True,
        show_content: bool = False
    ) -> Dict[str, Any]:
        """sui_getObject; returns {'data': {...}} or {'error': {...}}"""

        return await self._call(
            "sui_getObject",
            [object_id, self._object_options(show_type, show_content)]
        ) or {}

    async def multi_get_objects(
        self,
        object_ids: List[str],
        show_type: bool = True,
        show_content: bool = True
    ) -> List[Dict[str, Any]]:
        """sui_multiGetObjects; one response per id, in request order"""

        if len(object_ids) > MAX_MULTI_GET_IDS:
            raise ValueError(
                f"multi_get_objects accepts at most {MAX_MULTI_GET_IDS} ids, got {len(object_ids)}"
            )
        if not object_ids:
            return []

        return await self._call(
            "sui_multiGetObjects",
            [list(object_ids), self._object_options(show_type, show_content)]
        ) or []

    async def get_chain_identifier(self) -> str:
        return await self._call("sui_getChainIdentifier", [])
