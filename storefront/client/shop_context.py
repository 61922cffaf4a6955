"""
Client-side mirror of the shop state.

ShopContext loads the catalog and, with a token, the server cart. Cart
mutations are applied locally first and mirrored to the API on a single
background worker; the server's answer (or a failure) reconciles the local slot.
"""
import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:4000"
TOKEN_HEADER = "auth-token"


class ShopContext:

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: Optional[str] = None,
        session=None,
        executor: Optional[Executor] = None,
        timeout: float = 10.0
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout
        self.all_product: List[Dict[str, Any]] = []
        self.cart_items: Dict[int, int] = {}
        # Sum of local changes per item whose mirror call has not finished
        self._pending: Dict[int, int] = {}
        self._lock = threading.Lock()
        # One worker keeps mirrored mutations in submission order
        self._executor = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="shop-mirror")

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers[TOKEN_HEADER] = self.token
        return headers

    def _post(self, path: str, payload: Optional[Dict[str, Any]] = None):
        response = self.session.post(
            self._url(path), json=payload, headers=self._headers(), timeout=self.timeout
        )
        response.raise_for_status()
        return response.json()

    def load(self) -> None:
        """Fetch the product list and, when logged in, the server cart"""
        try:
            response = self.session.get(self._url("/allproducts"), headers=self._headers(), timeout=self.timeout)
            response.raise_for_status()
            self.all_product = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("There has been a problem loading products: %s", e)
            self.all_product = []

        if self.token:
            self.refresh_cart()

    def refresh_cart(self) -> None:
        try:
            data = self._post("/getcart")
        except (requests.RequestException, ValueError) as e:
            logger.error("Could not fetch cart: %s", e)
            return
        with self._lock:
            self.cart_items = {int(item_id): int(quantity) for item_id, quantity in data.items()}

    def signup(self, username: str, email: str, password: str) -> bool:
        return self._authenticate("/signup", {"username": username, "email": email, "password": password})

    def login(self, email: str, password: str) -> bool:
        return self._authenticate("/login", {"email": email, "password": password})

    def _authenticate(self, path: str, payload: Dict[str, str]) -> bool:
        response = self.session.post(self._url(path), json=payload, headers=self._headers(), timeout=self.timeout)
        try:
            data = response.json()
        except ValueError:
            logger.error("%s returned a non-JSON body", path)
            return False
        if not data.get("success"):
            logger.info("%s failed: %s", path, data.get("errors"))
            return False
        self.token = data["token"]
        self.refresh_cart()
        return True

    def add_to_cart(self, item_id: int) -> Optional[Future]:
        with self._lock:
            self.cart_items[item_id] = self.cart_items.get(item_id, 0) + 1
        return self._mirror("/addtocart", item_id, 1)

    def remove_from_cart(self, item_id: int) -> Optional[Future]:
        with self._lock:
            current = self.cart_items.get(item_id, 0)
            delta = -1 if current > 0 else 0
            if delta:
                self.cart_items[item_id] = current + delta
        return self._mirror("/removefromcart", item_id, delta)

    def _mirror(self, path: str, item_id: int, delta: int) -> Optional[Future]:
        if not self.token:
            return None
        with self._lock:
            self._pending[item_id] = self._pending.get(item_id, 0) + delta
        return self._executor.submit(self._send_mutation, path, item_id, delta)

    def _send_mutation(self, path: str, item_id: int, delta: int) -> bool:
        """Mirror one local change; the slot becomes server state plus changes still in flight"""
        try:
            data = self._post(path, {"itemId": item_id})
        except (requests.RequestException, ValueError) as e:
            logger.error("Mirroring %s for item %s failed, reverting: %s", path, item_id, e)
            with self._lock:
                self._settle(item_id, delta)
                self.cart_items[item_id] = max(self.cart_items.get(item_id, 0) - delta, 0)
            return False

        logger.debug("%s -> %s", path, data)
        state = data.get("data") if isinstance(data, dict) else None
        with self._lock:
            in_flight = self._settle(item_id, delta)
            if state and "quantity" in state:
                self.cart_items[item_id] = max(int(state["quantity"]) + in_flight, 0)
        return True

    def _settle(self, item_id: int, delta: int) -> int:
        """Drop a finished change from the pending total; returns what is still in flight"""
        remaining = self._pending.get(item_id, 0) - delta
        if remaining:
            self._pending[item_id] = remaining
        else:
            self._pending.pop(item_id, None)
        return remaining

    def get_total_cart_items(self) -> int:
        with self._lock:
            return sum(quantity for quantity in self.cart_items.values() if quantity > 0)

    def get_total_cart_amount(self) -> float:
        prices = {product["id"]: product["new_price"] for product in self.all_product}
        total_amount = 0
        with self._lock:
            for item_id, quantity in self.cart_items.items():
                if quantity > 0 and int(item_id) in prices:
                    total_amount += prices[int(item_id)] * quantity
        return total_amount

    def close(self) -> None:
        self._executor.shutdown(wait=True)
