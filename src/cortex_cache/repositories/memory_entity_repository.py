"""In-process implementation of EntityStore, for embedding and tests."""


class InMemoryEntityRepository:
    """Dict-backed EntityStore. Bodies live only as long as the instance."""

    def __init__(self) -> None:
        self._bodies: dict[str, bytes] = {}

    async def ping(self) -> bool:
        return True

    async def read(self, locator: str) -> bytes | None:
        return self._bodies.get(locator)

    async def write(self, locator: str, payload: bytes) -> None:
        self._bodies[locator] = payload

    def describe(self) -> dict:
        return {"backend": "memory", "bodies": len(self._bodies)}

    @property
    def locators(self) -> list[str]:
        return list(self._bodies)
