"""
Editable generation parameters for the studio.

Out-of-range numeric edits are clamped to the nearest bound, the same way
the front-end's range sliders behave, so an invalid value is never stored.
Values of the wrong kind (booleans, strings, NaN, fractional top-k) are
rejected with TypeError/ValueError.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from numbers import Real
from typing import Any

from shared.contracts.generation import ContentType, GenerationRequest, MAX_NEW_TOKENS

PLACEHOLDER_TEMPLATE = (
    'Enter a theme or prompt for your {type}... (e.g., "A rainy day in Tokyo")'
)


@dataclass(frozen=True)
class ParameterRange:
    """
    Valid range of one sampling parameter.

    - step: increment used by the editing surface; setters do not snap to it
    - integer: whether the parameter only takes whole numbers
    """

    name: str
    minimum: float | int
    maximum: float | int
    default: float | int
    step: float
    integer: bool = False

    def clamp(self, value: Any) -> float | int:
        if isinstance(value, bool) or not isinstance(value, Real):
            raise TypeError(
                f"{self.name} must be a number, got {type(value).__name__}"
            )
        if math.isnan(value):
            raise ValueError(f"{self.name} must not be NaN")

        if self.integer:
            if math.isfinite(value) and value != int(value):
                raise ValueError(f"{self.name} must be a whole number, got {value}")
            bounded = min(max(value, self.minimum), self.maximum)
            return int(bounded)
        return float(min(max(value, self.minimum), self.maximum))


TEMPERATURE = ParameterRange("temperature", 0.1, 1.5, 0.8, 0.1)
TOP_K = ParameterRange("top_k", 1, 100, 50, 1, integer=True)
TOP_P = ParameterRange("top_p", 0.1, 1.0, 0.95, 0.05)

RANGES: dict[str, ParameterRange] = {r.name: r for r in (TEMPERATURE, TOP_K, TOP_P)}

_EDITABLE = ("prompt", "content_type", *RANGES)


class ParameterModel:
    """Current prompt, content type and sampling parameters of the studio."""

    def __init__(
        self,
        prompt: str = "",
        content_type: ContentType | str = ContentType.STORY,
        temperature: float = TEMPERATURE.default,
        top_k: int = TOP_K.default,
        top_p: float = TOP_P.default,
    ) -> None:
        self.prompt = prompt
        self.content_type = content_type
        self.temperature = temperature
        self.top_k = top_k
        self.top_p = top_p

    @property
    def prompt(self) -> str:
        return self._prompt

    @prompt.setter
    def prompt(self, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"prompt must be a string, got {type(value).__name__}")
        self._prompt = value

    @property
    def content_type(self) -> ContentType:
        return self._content_type

    @content_type.setter
    def content_type(self, value: ContentType | str) -> None:
        if isinstance(value, ContentType):
            self._content_type = value
            return
        if not isinstance(value, str):
            raise TypeError(
                f"content_type must be a string, got {type(value).__name__}"
            )
        try:
            self._content_type = ContentType(value.strip().lower())
        except ValueError:
            choices = ", ".join(c.value for c in ContentType)
            raise ValueError(
                f"Unknown content type '{value}'. Available: {choices}"
            ) from None

    @property
    def temperature(self) -> float:
        return self._temperature

    @temperature.setter
    def temperature(self, value: float) -> None:
        self._temperature = TEMPERATURE.clamp(value)

    @property
    def top_k(self) -> int:
        return self._top_k

    @top_k.setter
    def top_k(self, value: int) -> None:
        self._top_k = TOP_K.clamp(value)

    @property
    def top_p(self) -> float:
        return self._top_p

    @top_p.setter
    def top_p(self, value: float) -> None:
        self._top_p = TOP_P.clamp(value)

    @property
    def max_new_tokens(self) -> int:
        return MAX_NEW_TOKENS

    @property
    def placeholder(self) -> str:
        return PLACEHOLDER_TEMPLATE.format(type=self._content_type.value)

    def is_submittable(self) -> bool:
        return bool(self._prompt.strip())

    def snapshot(self) -> GenerationRequest:
        """Copy the current values into an immutable request."""
        return GenerationRequest(
            prompt=self._prompt,
            content_type=self._content_type,
            temperature=self._temperature,
            top_k=self._top_k,
            top_p=self._top_p,
            max_new_tokens=MAX_NEW_TOKENS,
        )

    def update(self, **changes: Any) -> None:
        """
        Apply several edits through the setters, all or nothing.

        Edits are applied to a scratch copy first so that a rejected value
        leaves the model untouched.
        """
        unknown = sorted(set(changes) - set(_EDITABLE))
        if unknown:
            raise ValueError(f"Unknown parameter(s): {', '.join(unknown)}")
        scratch = ParameterModel(
            prompt=self._prompt,
            content_type=self._content_type,
            temperature=self._temperature,
            top_k=self._top_k,
            top_p=self._top_p,
        )
        for name in _EDITABLE:
            if name in changes:
                setattr(scratch, name, changes[name])
        self.__dict__.update(scratch.__dict__)

    def values(self) -> dict[str, Any]:
        return {
            "prompt": self._prompt,
            "type": self._content_type.value,
            "temperature": self._temperature,
            "top_k": self._top_k,
            "top_p": self._top_p,
            "max_new_tokens": MAX_NEW_TOKENS,
        }

    @staticmethod
    def ranges() -> dict[str, dict[str, Any]]:
        return {name: asdict(r) for name, r in RANGES.items()}
