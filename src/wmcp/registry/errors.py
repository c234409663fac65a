"""Error types raised while building the tool registry."""


class RegistryError(Exception):
    """Base error for all registry failures."""


class DuplicateToolError(RegistryError):
    """A tool with the same name is already registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Duplicate tool name: {name}")


class RegistryFrozenError(RegistryError):
    """Registration attempted after the server started accepting connections."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Registry is frozen, cannot register: {name}")


class InvalidSchemaError(RegistryError):
    """A tool declared a parameter schema that is not valid JSON Schema."""

    def __init__(self, name: str, detail: str = "") -> None:
        self.name = name
        self.detail = detail
        super().__init__(f"Invalid parameter schema for tool: {name}" + (f" ({detail})" if detail else ""))
