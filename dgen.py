'''
.------..------..------..------.
|d.--. ||g.--. ||e.--. ||n.--. |
| :/\: || :/\: || (\/) || :(): |
| (__) || :\/: || :\/: || ()() |
| '--'d|| '--'g|| '--'e|| '--'n|
`------'`------'`------'`------'
'''

import threading
import numpy as np
from faker import Faker
from sequin import from_iterable, generate, Stream
from typing import Any, Dict, Optional


class Generator:
    """schema interpreter."""

    def __init__(self, seed: Optional[int] = None):
        self._fake = Faker()
        if seed is not None:
            self._fake.seed_instance(seed)
        self._rng = np.random.default_rng(seed)
        # faker and numpy generators are not safe to share between threads
        self._lock = threading.Lock()

    def _resolve_faker_method(self, method_name: str, kwargs: Optional[Dict] = None) -> Any:
        try:
            method = getattr(self._fake, method_name)
        except AttributeError:
            raise ValueError(f"faker has no provider '{method_name}'") from None
        return method(**(kwargs or {}))

    def _resolve_provider(self, config: Dict, context: Dict) -> Any:
        provider = config["_gen_provider"]
        if provider == "ref":
            key = config["key"]
            if key not in context:
                raise ValueError(f"reference to '{key}' not found in current context.")
            value = context[key]
            if "format" in config:
                return config["format"].format(value)
            return value

        elif provider == "choice":
            # convert numpy's choice result to a native python type
            choice_result = self._rng.choice(config["from"])
            return choice_result.item() if hasattr(choice_result, 'item') else choice_result

        elif provider == "int":
            # inclusive bounds
            return int(self._rng.integers(config["min"], config["max"], endpoint=True))

        elif provider == "literal":
            if "value" not in config:
                raise ValueError("_gen_provider 'literal' requires a 'value' key.")
            return config["value"]

        else:
            raise ValueError(f"unknown _gen_provider: '{provider}'")

    def create(self, schema: Any, context: Optional[Dict] = None) -> Any:
        with self._lock:
            return self._create(schema, context or {})

    def _create(self, schema: Any, context: Dict) -> Any:
        if isinstance(schema, dict):
            if "_gen_provider" in schema:
                return self._resolve_provider(schema, context)

            # build the object key by key so later keys can ref earlier ones
            generated_obj = {}
            for k, v in schema.items():
                merged_context = {**context, **generated_obj}
                generated_obj[k] = self._create(v, merged_context)
            return generated_obj

        if isinstance(schema, list):
            if not schema: return []
            item_schema = schema[0]
            count = self._get_count(item_schema)
            # the item schema sits under '_gen_items' when a count is attached
            actual_item_schema = item_schema.get('_gen_items', item_schema) if isinstance(item_schema, dict) else item_schema
            return [self._create(actual_item_schema, context) for _ in range(count)]

        if isinstance(schema, str):
            if hasattr(self._fake, schema):
                return self._resolve_faker_method(schema)
            return schema  # otherwise, it's a literal string.

        if isinstance(schema, tuple) and len(schema) == 2 and isinstance(schema[1], dict):
            return self._resolve_faker_method(schema[0], schema[1])

        return schema

    def _get_count(self, item_schema: Any) -> int:
        count = 5 # default count
        if isinstance(item_schema, dict) and "_gen_count" in item_schema:
            count_config = item_schema["_gen_count"]
            if isinstance(count_config, int):
                count = count_config
            elif isinstance(count_config, (list, tuple)) and len(count_config) == 2:
                low, high = count_config
                count = int(self._rng.integers(low, high, endpoint=True))
        return count


class _SchemaProvider:
    def __init__(self, schema: Any, seed: Optional[int] = None):
        self._schema = schema
        self._generator = Generator(seed)

    def take(self, count: int) -> Stream:
        """a re-iterable stream over count generated records (generated once, up front)"""
        return from_iterable([self._generator.create(self._schema) for _ in range(count)])

    def stream(self) -> Stream:
        """an endless stream generating a new record per pull"""
        return generate(lambda: self._generator.create(self._schema))


def from_schema(schema: Any, seed: Optional[int] = None) -> _SchemaProvider:
    return _SchemaProvider(schema, seed)
