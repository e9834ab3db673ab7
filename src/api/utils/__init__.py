"""API utilities: the orjson response class and envelope builders."""
