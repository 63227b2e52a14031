from typing import Any, Callable, Dict, Iterator, List, Type, TypeVar

T = TypeVar("T")


class Registry:
    """Named lookup of pluggable collaborator classes (classifiers, materializers)."""

    def __init__(self, name: str):
        """
        Args:
            name: The kind of component held (e.g., "classifier", "materializer").
        """
        self._name = name
        self._components: Dict[str, Type[Any]] = {}

    def register(self, name: str) -> Callable[[Type[T]], Type[T]]:
        """
        Class decorator registering the decorated class under `name`.

        Raises:
            ValueError: If the name is already taken.
        """
        def decorator(cls: Type[T]) -> Type[T]:
            if name in self._components:
                raise ValueError(f"{self._name.capitalize()} '{name}' is already registered.")
            self._components[name] = cls
            return cls
        return decorator

    def get(self, name: str) -> Type[Any]:
        """
        Retrieves a registered class by name.

        Raises:
            KeyError: If nothing is registered under `name`.
        """
        try:
            return self._components[name]
        except KeyError:
            raise KeyError(
                f"Unknown {self._name} '{name}'. Available: {self.names()}"
            ) from None

    def create(self, name: str, *args: Any, **kwargs: Any) -> Any:
        """Instantiates the class registered under `name` with the given arguments."""
        return self.get(name)(*args, **kwargs)

    def names(self) -> List[str]:
        return sorted(self._components)

    def __contains__(self, name: str) -> bool:
        return name in self._components

    def __iter__(self) -> Iterator[str]:
        return iter(self._components)


classifier_registry = Registry("classifier")
materializer_registry = Registry("materializer")
