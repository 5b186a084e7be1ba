"""Activation function library for cyclic network phenotypes.

Functions are pure ``float -> float`` callables addressed by a closed set of
identifiers. Lookup goes through an explicit :class:`ActivationFunctionLibrary`
value handed to the network builder, so no mutable module-level registry is
consulted at build time.
"""

from __future__ import annotations

import math
import struct
from collections.abc import Callable, Iterable, Iterator, Mapping
from enum import Enum

ActivationFunction = Callable[[float], float]

_INT64 = struct.Struct("<q")
_FLOAT64 = struct.Struct("<d")

# Schraudolph (1999): 2**20 / ln(2) and the exponent bias shifted by the
# RMS-minimising correction 60801.
EXP_APPROX_SCALE = 1512775
EXP_APPROX_OFFSET = 1072693248 - 60801
# Worst-case relative error of exp_approx against math.exp in its valid range.
EXP_APPROX_MAX_RELATIVE_ERROR = 0.045

# High 32-bit word limits: 0 encodes +0.0 and 0x7FF00000 encodes +inf.
_HIGH_WORD_MIN = 0
_HIGH_WORD_MAX = 0x7FF00000


class ActivationFunctionNotFoundError(KeyError):
    """Raised when an activation identifier is not present in a library."""

    def __init__(self, identifier: object, available: Iterable[str] = ()) -> None:
        self.identifier = identifier
        self.available = tuple(available)
        super().__init__(identifier)

    def __str__(self) -> str:
        valid = ", ".join(self.available)
        return f"Unknown activation function {self.identifier!r}. Expected one of: {valid}"


class ActivationFunctionId(str, Enum):
    """Identifiers of the built-in activation functions."""

    IDENTITY = "identity"
    LOGISTIC_APPROXIMANT_STEEP = "logistic_approximant_steep"
    SOFTSIGN_STEEP = "softsign_steep"
    SIGMOID = "sigmoid"
    TANH = "tanh"
    RELU = "relu"

    @classmethod
    def coerce(cls, value: ActivationFunctionId | str) -> ActivationFunctionId:
        """Coerce a string or ActivationFunctionId into an ActivationFunctionId."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            msg = f"Unsupported activation identifier value: {value!r}"
            raise TypeError(msg)
        name = normalize_identifier(value)
        name = LEGACY_ALIASES.get(name, name)
        try:
            return cls(name)
        except ValueError as error:
            raise ActivationFunctionNotFoundError(
                value, (member.value for member in cls)
            ) from error


def normalize_identifier(name: str) -> str:
    return name.strip().lower()


# Identifiers written by older genome files. "scaledelu" is the id the steep
# softsign was historically serialised under and must keep resolving to it.
LEGACY_ALIASES: dict[str, str] = {
    "logisticapproximantsteep": ActivationFunctionId.LOGISTIC_APPROXIMANT_STEEP.value,
    "softsignsteep": ActivationFunctionId.SOFTSIGN_STEEP.value,
    "scaledelu": ActivationFunctionId.SOFTSIGN_STEEP.value,
}


def exp_approx(val: float) -> float:
    """Fast approximation of ``exp(val)`` by building the IEEE-754 bit pattern.

    ``EXP_APPROX_SCALE * val + EXP_APPROX_OFFSET`` is truncated to an integer,
    used as the high 32-bit word of a double and reinterpreted. The result is
    within ``EXP_APPROX_MAX_RELATIVE_ERROR`` of ``math.exp`` for ``val`` in
    roughly ``[-708, 709]``. Outside that range the high word saturates, giving
    ``0.0`` below and ``inf`` above. NaN is returned unchanged.
    """
    scaled = EXP_APPROX_SCALE * val + EXP_APPROX_OFFSET
    if scaled != scaled:
        return scaled
    if scaled <= _HIGH_WORD_MIN:
        return 0.0
    if scaled >= _HIGH_WORD_MAX:
        return math.inf
    return int64_bits_to_float(int(scaled) << 32)


def int64_bits_to_float(bits: int) -> float:
    """Reinterpret a signed 64-bit integer as the double with the same bits."""
    return _FLOAT64.unpack(_INT64.pack(bits))[0]


def float_to_int64_bits(value: float) -> int:
    """Return the signed 64-bit integer sharing the bit pattern of ``value``."""
    return _INT64.unpack(_FLOAT64.pack(value))[0]


def identity(x: float) -> float:
    return x


def logistic_approximant_steep(x: float) -> float:
    """Steep logistic ``1 / (1 + e^(-4.9x))`` evaluated with :func:`exp_approx`."""
    return 1.0 / (1.0 + exp_approx(-4.9 * x))


def softsign_steep(x: float) -> float:
    """Unipolar softsign with a slope near the origin matching the steep logistic."""
    return 0.5 + x / (2.0 * (0.2 + abs(x)))


def sigmoid(x: float) -> float:
    if x >= 0:
        z = math.exp(-x)
        return 1.0 / (1.0 + z)
    z = math.exp(x)
    return z / (1.0 + z)


def relu(x: float) -> float:
    return x if x > 0.0 else 0.0


BUILTIN_ACTIVATIONS: Mapping[ActivationFunctionId, ActivationFunction] = {
    ActivationFunctionId.IDENTITY: identity,
    ActivationFunctionId.LOGISTIC_APPROXIMANT_STEEP: logistic_approximant_steep,
    ActivationFunctionId.SOFTSIGN_STEEP: softsign_steep,
    ActivationFunctionId.SIGMOID: sigmoid,
    ActivationFunctionId.TANH: math.tanh,
    ActivationFunctionId.RELU: relu,
}


class ActivationFunctionLibrary:
    """Immutable mapping from activation identifiers to functions."""

    __slots__ = ("_functions", "_aliases")

    def __init__(
        self,
        functions: Mapping[str, ActivationFunction],
        *,
        aliases: Mapping[str, str] | None = None,
    ) -> None:
        table: dict[str, ActivationFunction] = {}
        for name, function in functions.items():
            key = normalize_identifier(str(getattr(name, "value", name)))
            if not key:
                msg = "Activation identifiers must be non-empty strings."
                raise ValueError(msg)
            if key in table:
                msg = f"Duplicate activation identifier {key!r}."
                raise ValueError(msg)
            if not callable(function):
                msg = f"Activation {key!r} is not callable."
                raise TypeError(msg)
            table[key] = function

        alias_table: dict[str, str] = {}
        for alias, target in (aliases or {}).items():
            alias_key = normalize_identifier(alias)
            target_key = normalize_identifier(target)
            # Real identifiers shadow aliases; aliases to absent functions drop.
            if alias_key in table or target_key not in table:
                continue
            alias_table[alias_key] = target_key

        self._functions = table
        self._aliases = alias_table

    def get(self, identifier: ActivationFunctionId | str) -> ActivationFunction:
        """Return the function registered under ``identifier``."""
        if isinstance(identifier, ActivationFunctionId):
            key = identifier.value
        elif isinstance(identifier, str):
            key = normalize_identifier(identifier)
        else:
            msg = f"Unsupported activation identifier value: {identifier!r}"
            raise TypeError(msg)
        key = self._aliases.get(key, key)
        try:
            return self._functions[key]
        except KeyError as error:
            raise ActivationFunctionNotFoundError(
                identifier, self._functions
            ) from error

    def resolve(
        self, identifiers: Iterable[ActivationFunctionId | str]
    ) -> list[ActivationFunction]:
        """Map a sequence of identifiers to their functions, in order."""
        return [self.get(identifier) for identifier in identifiers]

    def identifiers(self) -> tuple[str, ...]:
        """Return the canonical identifiers in registration order."""
        return tuple(self._functions)

    def canonical(self, identifier: ActivationFunctionId | str) -> str:
        """Return the canonical identifier for a name or legacy alias."""
        self.get(identifier)
        key = (
            identifier.value
            if isinstance(identifier, ActivationFunctionId)
            else normalize_identifier(identifier)
        )
        return self._aliases.get(key, key)

    def with_functions(
        self, functions: Mapping[str, ActivationFunction]
    ) -> ActivationFunctionLibrary:
        """Return a new library extended with additional functions."""
        merged: dict[str, ActivationFunction] = dict(self._functions)
        for name, function in functions.items():
            merged[normalize_identifier(name)] = function
        return ActivationFunctionLibrary(merged, aliases=self._aliases)

    def __contains__(self, identifier: object) -> bool:
        if not isinstance(identifier, str):
            return False
        try:
            self.get(identifier)
        except ActivationFunctionNotFoundError:
            return False
        return True

    def __iter__(self) -> Iterator[str]:
        return iter(self._functions)

    def __len__(self) -> int:
        return len(self._functions)

    def __repr__(self) -> str:
        return f"ActivationFunctionLibrary({', '.join(self._functions)})"


def default_library() -> ActivationFunctionLibrary:
    """Return a new library holding every built-in activation function."""
    return ActivationFunctionLibrary(
        {member.value: function for member, function in BUILTIN_ACTIVATIONS.items()},
        aliases=LEGACY_ALIASES,
    )


__all__ = [
    "ActivationFunction",
    "ActivationFunctionId",
    "ActivationFunctionLibrary",
    "ActivationFunctionNotFoundError",
    "BUILTIN_ACTIVATIONS",
    "EXP_APPROX_MAX_RELATIVE_ERROR",
    "EXP_APPROX_OFFSET",
    "EXP_APPROX_SCALE",
    "LEGACY_ALIASES",
    "default_library",
    "exp_approx",
    "float_to_int64_bits",
    "identity",
    "int64_bits_to_float",
    "logistic_approximant_steep",
    "normalize_identifier",
    "relu",
    "sigmoid",
    "softsign_steep",
]
