import asyncio

from shared.cache import CART_PATTERN, PRODUCTS_PATTERN, cache_key
from shared.cache.memory_adapter import InMemoryCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestCacheKey:
    def test_keys_are_sorted_and_drop_empty_values(self):
        key = cache_key("products", {"page": 2, "keyword": "lamp", "category": None, "price[gte]": ""})
        assert key == "products:keyword=lamp&page=2"

    def test_same_params_give_same_key(self):
        assert cache_key("products", {"a": 1, "b": 2}) == cache_key("products", {"b": 2, "a": 1})

    def test_no_params(self):
        assert cache_key("cart") == "cart:"


class TestInMemoryCache:
    def test_set_then_get(self):
        cache = InMemoryCache("products")
        asyncio.run(cache.set("products:page=1", {"products": []}))
        assert asyncio.run(cache.get("products:page=1")) == {"products": []}

    def test_entries_expire(self):
        clock = FakeClock()
        cache = InMemoryCache("products", default_ttl=120, clock=clock)
        asyncio.run(cache.set("k", "v"))
        clock.now += 121
        assert asyncio.run(cache.get("k")) is None
        assert len(cache) == 0

    def test_per_entry_ttl(self):
        clock = FakeClock()
        cache = InMemoryCache("cart", default_ttl=120, clock=clock)
        asyncio.run(cache.set("k", "v", ttl=5))
        clock.now += 6
        assert asyncio.run(cache.get("k")) is None

    def test_delete(self):
        cache = InMemoryCache("cart")
        asyncio.run(cache.set("cart:userId=u1", "v"))
        assert asyncio.run(cache.delete("cart:userId=u1")) is True
        assert asyncio.run(cache.delete("cart:userId=u1")) is False

    def test_invalidate_pattern(self):
        cache = InMemoryCache("mixed")
        for key in ("products:page=1", "products:page=2", "cart:userId=u1"):
            asyncio.run(cache.set(key, "v"))
        assert asyncio.run(cache.invalidate_pattern(PRODUCTS_PATTERN)) == 2
        assert asyncio.run(cache.get("cart:userId=u1")) == "v"
        assert asyncio.run(cache.invalidate_pattern(CART_PATTERN)) == 1

    def test_full_cache_evicts_soonest_expiring_entry(self):
        clock = FakeClock()
        cache = InMemoryCache("small", max_entries=2, clock=clock)
        asyncio.run(cache.set("a", 1, ttl=10))
        asyncio.run(cache.set("b", 2, ttl=100))
        asyncio.run(cache.set("c", 3))
        assert asyncio.run(cache.get("a")) is None
        assert asyncio.run(cache.get("b")) == 2
        assert asyncio.run(cache.get("c")) == 3
