from dataclasses import dataclass
from typing import Generic, Tuple, TypeVar, Union

from .exceptions import ValidationError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    errors: Tuple[str, ...]

    @property
    def ok(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return self.errors[0]


Result = Union[Ok[T], Err]


def unwrap(result: "Result[T]") -> T:
    """Devuelve el valor validado o levanta `ValidationError` con todas las violaciones."""
    if isinstance(result, Err):
        raise ValidationError(result.errors)
    return result.value
