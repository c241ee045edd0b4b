"""Solver configuration read from ``key = value`` files."""

from __future__ import annotations

import os
import re
from collections.abc import Callable
from dataclasses import dataclass, field

ScalarFunction = Callable[[float, float], float]

DEFAULT_MESH_DIR = "../meshes/"
DEFAULT_MESH = "square2d_4elt.msh"


def _uniform(value: float, name: str) -> ScalarFunction:
    """Build a function of (x, y) that takes the same value everywhere."""

    def function(x: float, y: float) -> float:
        return value

    function.__name__ = name
    function.__qualname__ = name
    return function


constant = _uniform(1.0, "constant")
zero = _uniform(0.0, "zero")
quadratic_f = _uniform(-4.0, "quadratic_f")


def quadratic_g(x: float, y: float) -> float:
    return x * x + y * y


def linear_g(x: float, y: float) -> float:
    return x + y


def quadratic_dx(x: float, y: float) -> float:
    return 2 * x


def quadratic_dy(x: float, y: float) -> float:
    return 2 * y


FUNCTIONS: dict[str, ScalarFunction] = {
    "constant": constant,
    "quadratic_g": quadratic_g,
    "linear_g": linear_g,
    "zero": zero,
    "quadratic_f": quadratic_f,
    "quadratic_dx": quadratic_dx,
    "quadratic_dy": quadratic_dy,
}


@dataclass(frozen=True)
class Config:
    """Parameters of a solver run; the defaults solve with a constant source and zero boundary."""

    mesh_path: str = os.path.join(DEFAULT_MESH_DIR, DEFAULT_MESH)
    label: str = "constant"
    integration_order: int = 1
    source: ScalarFunction = constant
    boundary: ScalarFunction = zero
    solution: ScalarFunction | None = None
    dx_solution: ScalarFunction | None = None
    dy_solution: ScalarFunction | None = None
    entries: dict[str, str] = field(default_factory=dict)


def parse_line(line: str) -> tuple[str, str]:
    """Split ``key = value`` into its key and value; missing parts are empty."""
    tokens = line.split()
    key = tokens[0] if tokens else ""
    value = tokens[2] if len(tokens) > 2 else ""
    return key, value


def _leading_int(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    if match is None:
        raise ValueError(f"invalid integration order: {text!r}")
    return int(match.group(1))


def load_config(path: str | os.PathLike[str], mesh_dir: str = DEFAULT_MESH_DIR) -> Config:
    """Read a configuration file, falling back to the defaults if it cannot be opened.

    Function names that are not known leave the corresponding default in place.
    """
    try:
        with open(path, encoding="utf-8") as handle:
            lines = handle.read().splitlines()
    except OSError:
        print("Loading config file failed, resorting to default parameters")
        return Config(mesh_path=os.path.join(mesh_dir, DEFAULT_MESH))

    entries: dict[str, str] = {}
    for line in lines:
        if not line or line.startswith("#"):
            continue
        key, value = parse_line(line)
        entries[key] = value

    defaults = Config()
    config = Config(
        mesh_path=os.path.join(mesh_dir, entries.get("mesh_file", "")),
        label=entries.get("label", ""),
        integration_order=_leading_int(entries.get("integration_order", "")),
        source=FUNCTIONS.get(entries.get("source", ""), defaults.source),
        boundary=FUNCTIONS.get(entries.get("boundary", ""), defaults.boundary),
        solution=FUNCTIONS.get(entries.get("sol", "")),
        dx_solution=FUNCTIONS.get(entries.get("dx_sol", "")),
        dy_solution=FUNCTIONS.get(entries.get("dy_sol", "")),
        entries=entries,
    )

    print("Loaded config:")
    for key, value in entries.items():
        print(f" - {key}: {value}")
    return config